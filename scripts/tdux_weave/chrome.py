#!/usr/bin/env python3
"""
Wires the sidebar and contents controllers to a rendered page.

This is the only place element ids are looked up; the controllers get
their elements, storage and event sources from here.
"""
from dataclasses import dataclass
from typing import Any, Optional

from bs4 import BeautifulSoup

from . import config
from .contents_modal import ContentsModalController
from .events import EventHub, Window
from .index_builder import IndexKind, load_index_file
from .sidebar import MemoryStorage, SidebarController
from .stylesheet import StyleSheet


@dataclass
class Chrome:
    document: BeautifulSoup
    hub: EventHub
    window: Window
    sidebar: SidebarController
    contents: ContentsModalController

    @property
    def index_script(self):
        return self.document.find(id=config.MAJOR_MODULE_SCRIPT_ID)

    def load_major_index(self, path) -> None:
        """Simulate the index <script> finishing: parse the file, fire `load`."""
        kind, entries = load_index_file(path)
        if kind is not IndexKind.MAJOR_MODULE:
            raise ValueError(f"{path} is a {kind.value} index, not the major-module index")
        self.hub.dispatch(self.index_script, "load", entries)


def load_page(html: str) -> BeautifulSoup:
    return BeautifulSoup(html, "html.parser")


def bind_chrome(document: BeautifulSoup, window: Optional[Window] = None, storage: Any = None,
                hub: Optional[EventHub] = None, stylesheet: Optional[StyleSheet] = None) -> Chrome:
    window = window or Window()
    storage = storage if storage is not None else MemoryStorage()
    hub = hub or EventHub()
    stylesheet = stylesheet or StyleSheet()

    sidebar_el = document.find(id="sidebar")
    sidebar = SidebarController(
        root=document.html,
        sidebar=sidebar_el,
        toggle_button=document.find(id="sidebar-toggle"),
        resize_handle=document.find(id="sidebar-resize-handle"),
        window=window,
        storage=storage,
        hub=hub,
        computed_style=stylesheet.computed_style,
        document=document,
        links=sidebar_el.find_all("a"),
    )
    contents = ContentsModalController(
        overlay=document.find(id="modal-overlay"),
        modal=document.find(id="contents-modal"),
        container=document.find(id="contents-modal-contents"),
        body=document.body,
        computed_style=stylesheet.computed_style,
        hub=hub,
        document=document,
    )

    sidebar.start()
    contents.start(document)
    hub.add_listener(document.find(id=config.MAJOR_MODULE_SCRIPT_ID), "load", contents.on_index_loaded)
    return Chrome(document=document, hub=hub, window=window, sidebar=sidebar, contents=contents)
