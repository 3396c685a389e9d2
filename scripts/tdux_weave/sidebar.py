#!/usr/bin/env python3
"""
Sidebar builder and controller for woven documents.
Creates the HTML for the collapsible sidebar with the module list, and
drives its hidden / visible / resizing state once a page is loaded.
"""
from enum import Enum
from html import escape
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence, Tuple

from bs4 import Tag

from . import config
from .events import EventHub, MouseEvent, TouchEvent, Window
from .index_builder import ModuleEntry
from .stylesheet import (add_class, get_style_property, has_class, remove_class,
                         set_style_property, toggle_class)


def build_sidebar(modules: Sequence[ModuleEntry], active_id: Optional[int] = None,
                  parts: Optional[Sequence[Tuple[str, Sequence[ModuleEntry]]]] = None,
                  title: str = "Contents", home_url: str = "index.html") -> str:
    """
    Build the sidebar HTML with navigation.
    With `parts`, modules are grouped under collapsible part headings
    (a.toggle); otherwise a flat list of `modules` is rendered.
    """
    html = f'''
    <div class="sidebar-header">
        <div class="header-title">
            <a href="{escape(home_url)}" tabindex="-1"><span>{escape(title)}</span></a>
        </div>
    </div>
    <ul class="chapter-list">
    '''

    def module_item(entry: ModuleEntry) -> str:
        active = " active" if entry.id == active_id else ""
        return (f'<li class="chapter-item{active}">'
                f'<a href="#m{entry.id}" tabindex="-1">{entry.id}. {escape(entry.description)}</a></li>')

    if parts:
        for part_title, entries in parts:
            expanded = " expanded" if any(e.id == active_id for e in entries) else ""
            html += f'<li class="part-item{expanded}">'
            html += f'<a class="toggle" href="#" tabindex="-1">{escape(part_title)}</a>'
            html += '<ul class="section-list">' + "".join(module_item(e) for e in entries) + '</ul>'
            html += '</li>'
    else:
        html += "".join(module_item(e) for e in modules)

    html += '</ul>'
    return html


# ----------------------------
# Persistence
# ----------------------------

class MemoryStorage:
    """localStorage stand-in. `fail=True` makes every access raise, like a locked-down browser."""

    def __init__(self, initial: Optional[Dict[str, str]] = None, fail: bool = False):
        self.data: Dict[str, str] = dict(initial or {})
        self.fail = fail

    def get_item(self, key: str) -> Optional[str]:
        if self.fail:
            raise PermissionError("storage unavailable")
        return self.data.get(key)

    def set_item(self, key: str, value: str) -> None:
        if self.fail:
            raise PermissionError("storage unavailable")
        self.data[key] = value


# ----------------------------
# Controller
# ----------------------------

class SidebarState(Enum):
    HIDDEN = "hidden"
    VISIBLE = "visible"
    RESIZING = "resizing"


def _parse_px(value: str) -> Optional[int]:
    digits = ""
    for ch in (value or "").strip():
        if ch.isdigit() or (ch == "-" and not digits):
            digits += ch
        else:
            break
    try:
        return int(digits)
    except ValueError:
        return None


class SidebarController:
    """
    Visibility lives in classes on the root element (sidebar-hidden,
    sidebar-visible, sidebar-resizing), so the stylesheet and this
    controller always agree on the current state.

    Link focusability mirrors visibility: every show/hide rewrites the
    tabindex of all sidebar links.
    """

    def __init__(self, root: Tag, sidebar: Tag, toggle_button: Tag, resize_handle: Tag,
                 window: Window, storage: Any, hub: EventHub,
                 computed_style: Callable[[Tag], Dict[str, str]],
                 document: Any = None, links: Optional[Iterable[Tag]] = None,
                 sidebar_offset_left: int = 0):
        self.root = root
        self.sidebar = sidebar
        self.toggle_button = toggle_button
        self.resize_handle = resize_handle
        self.window = window
        self.storage = storage
        self.hub = hub
        self.computed_style = computed_style
        self.document = document if document is not None else root
        self.links: List[Tag] = list(links) if links is not None else sidebar.find_all("a")
        self.sidebar_offset_left = sidebar_offset_left
        self.first_contact: Optional[Tuple[float, float]] = None  # (x, ms)
        self.last_position: Optional[float] = None

    # --- wiring ---

    def start(self) -> None:
        """Restore the persisted choice and register listeners."""
        saved = self._load()
        if saved == SidebarState.VISIBLE.value:
            self.show()
        elif saved == SidebarState.HIDDEN.value:
            self.hide()

        self.hub.add_listener(self.toggle_button, "click", self.on_toggle_click)
        self.hub.add_listener(self.resize_handle, "mousedown", self.init_resize)
        self.hub.add_listener(self.document, "touchstart", self.on_touch_start)
        self.hub.add_listener(self.document, "touchmove", self.on_touch_move)
        for anchor in self.sidebar.select("a.toggle"):
            self.hub.add_listener(anchor, "click", self._section_toggler(anchor))

    def _section_toggler(self, anchor: Tag):
        return lambda event=None: self.toggle_section(anchor)

    # --- state ---

    @property
    def state(self) -> Optional[SidebarState]:
        """None until the first show/hide (state is then read from computed style)."""
        if has_class(self.root, "sidebar-resizing"):
            return SidebarState.RESIZING
        if has_class(self.root, "sidebar-visible"):
            return SidebarState.VISIBLE
        if has_class(self.root, "sidebar-hidden"):
            return SidebarState.HIDDEN
        return None

    def is_hidden(self) -> bool:
        return has_class(self.root, "sidebar-hidden")

    def is_visible(self) -> bool:
        return has_class(self.root, "sidebar-visible")

    def show(self) -> None:
        remove_class(self.root, "sidebar-hidden")
        add_class(self.root, "sidebar-visible")
        for link in self.links:
            link["tabindex"] = "0"
        self.toggle_button["aria-expanded"] = "true"
        self.sidebar["aria-hidden"] = "false"
        self._save(SidebarState.VISIBLE)

    def hide(self) -> None:
        remove_class(self.root, "sidebar-visible")
        add_class(self.root, "sidebar-hidden")
        for link in self.links:
            link["tabindex"] = "-1"
        self.toggle_button["aria-expanded"] = "false"
        self.sidebar["aria-hidden"] = "true"
        self._save(SidebarState.HIDDEN)

    def _save(self, state: SidebarState) -> None:
        try:
            self.storage.set_item(config.SIDEBAR_STORAGE_KEY, state.value)
        except Exception:
            pass  # best effort: the choice still applies to this view

    def _load(self) -> Optional[str]:
        try:
            return self.storage.get_item(config.SIDEBAR_STORAGE_KEY)
        except Exception:
            return None

    # --- toggle button ---

    def on_toggle_click(self, event=None) -> None:
        if self.is_hidden():
            current_width = _parse_px(get_style_property(self.root, config.SIDEBAR_WIDTH_PROPERTY))
            if current_width is not None and current_width < config.SIDEBAR_MIN_TOGGLE_WIDTH:
                set_style_property(self.root, config.SIDEBAR_WIDTH_PROPERTY,
                                   f"{config.SIDEBAR_MIN_TOGGLE_WIDTH}px")
            self.show()
        elif self.is_visible():
            self.hide()
        elif self.computed_style(self.sidebar).get("transform", "none") == "none":
            self.hide()
        else:
            self.show()

    def toggle_section(self, anchor: Tag) -> bool:
        return toggle_class(anchor.parent, "expanded")

    def active_section(self) -> Optional[Tag]:
        """The entry the host should scroll into view."""
        return self.sidebar.select_one(".active")

    # --- resize ---

    def init_resize(self, event: Optional[MouseEvent] = None) -> None:
        self.last_position = None
        self.hub.add_listener(self.window, "mousemove", self.resize)
        self.hub.add_listener(self.window, "mouseup", self.stop_resize)
        add_class(self.root, "sidebar-resizing")

    def resize(self, event: MouseEvent) -> None:
        pos = event.client_x - self.sidebar_offset_left
        self.last_position = pos
        if pos < config.SIDEBAR_HIDE_BELOW:
            if not self.is_hidden():
                self.hide()
            return
        if not self.is_visible():
            self.show()
        pos = min(pos, self.window.inner_width - config.SIDEBAR_RIGHT_MARGIN)
        set_style_property(self.root, config.SIDEBAR_WIDTH_PROPERTY, f"{int(pos)}px")

    def stop_resize(self, event: Optional[MouseEvent] = None) -> None:
        remove_class(self.root, "sidebar-resizing")
        self.hub.remove_listener(self.window, "mousemove", self.resize)
        self.hub.remove_listener(self.window, "mouseup", self.stop_resize)
        if self.last_position is None:
            return
        if self.last_position < config.SIDEBAR_HIDE_BELOW:
            if not self.is_hidden():
                self.hide()
        elif not self.is_visible():
            self.show()

    # --- touch ---

    def on_touch_start(self, event: TouchEvent) -> None:
        self.first_contact = (event.client_x, event.timestamp)

    def on_touch_move(self, event: TouchEvent) -> None:
        if not self.first_contact:
            return

        start_x, start_time = self.first_contact
        cur_x = event.client_x
        x_diff = cur_x - start_x
        t_diff = event.timestamp - start_time

        if t_diff < config.SWIPE_MAX_MS and abs(x_diff) >= config.SWIPE_MIN_PX:
            edge = min(self.window.body_width * config.SWIPE_EDGE_FRACTION, config.SWIPE_EDGE_MAX_PX)
            if x_diff >= 0 and start_x < edge:
                self.show()
            elif x_diff < 0 and cur_x < config.SWIPE_EDGE_MAX_PX:
                self.hide()
            self.first_contact = None
