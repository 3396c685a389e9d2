#!/usr/bin/env python3
"""
Contents modal: the table of contents built from the major-module index.
"""
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Union

from bs4 import BeautifulSoup, Tag

from . import config
from .events import EventHub, KeyEvent
from .index_builder import ModuleEntry
from .stylesheet import add_class, get_style_property, remove_class, remove_style_property, set_style_property

INPUT_TAGS = ("input", "textarea", "select")


def _captures_input(target: Any) -> bool:
    if not isinstance(target, Tag):
        return False
    if target.name in INPUT_TAGS:
        return True
    return target.get("contenteditable", "false") not in ("false", None)


def _as_entry(item: Union[ModuleEntry, Mapping]) -> ModuleEntry:
    if isinstance(item, ModuleEntry):
        return item
    return ModuleEntry(int(item["id"]), item.get("d", item.get("description", "")))


class ContentsModalController:
    """
    Open/closed is read from the modal's computed display on every toggle,
    never from a flag kept here: the rendered page is the source of truth,
    even when other scripts have touched the classes.
    """

    def __init__(self, overlay: Tag, modal: Tag, container: Tag, body: Tag,
                 computed_style: Callable[[Tag], Dict[str, str]], hub: EventHub,
                 document: Optional[BeautifulSoup] = None):
        self.overlay = overlay
        self.modal = modal
        self.container = container
        self.body = body
        self.computed_style = computed_style
        self.hub = hub
        self.document = document if document is not None else BeautifulSoup("", "html.parser")
        self.populated = False
        self._saved_overflow = ""

    def start(self, key_target: Any) -> None:
        self.hub.add_listener(key_target, "keypress", self.on_key_press)

    def is_open(self) -> bool:
        return self.computed_style(self.modal).get("display", "block") != "none"

    def toggle(self, event=None) -> bool:
        """Returns True when the modal is now open."""
        if not self.is_open():
            add_class(self.overlay, "modal-overlay-visible")
            add_class(self.modal, "modal-container-visible")
            self._saved_overflow = get_style_property(self.body, "overflow")
            set_style_property(self.body, "overflow", "hidden")
            return True

        remove_class(self.overlay, "modal-overlay-visible")
        remove_class(self.modal, "modal-container-visible")
        if self._saved_overflow:
            set_style_property(self.body, "overflow", self._saved_overflow)
        else:
            remove_style_property(self.body, "overflow")
        self._saved_overflow = ""
        return False

    def on_key_press(self, event: KeyEvent) -> None:
        if event.key == config.CONTENTS_KEY and not _captures_input(event.target):
            self.toggle()

    def on_index_loaded(self, entries: Iterable[Union[ModuleEntry, Mapping]]) -> List[Tag]:
        """Replace the placeholder with one link per module, in recorded order."""
        self.container.clear()
        ul = self.document.new_tag("ul")
        self.container.append(ul)

        links = []
        for item in entries:
            entry = _as_entry(item)
            li = self.document.new_tag("li")
            a = self.document.new_tag("a", href=f"#m{entry.id}")
            a.string = f"{entry.id}. {entry.description}"
            li.append(a)
            ul.append(li)
            self.hub.add_listener(a, "click", self.toggle)
            links.append(a)

        self.populated = True
        return links
