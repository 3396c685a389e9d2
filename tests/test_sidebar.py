import pytest

from tdux_weave import bind_chrome, build_sidebar, load_page
from tdux_weave.events import EventHub, MouseEvent, TouchEvent
from tdux_weave.index_builder import ModuleEntry
from tdux_weave.sidebar import MemoryStorage, SidebarState
from tdux_weave.stylesheet import get_style_property, set_style_property


def _click(chrome, element):
    chrome.hub.dispatch(element, "click")


def _swipe(chrome, start_x, end_x, elapsed_ms, start_ms=10_000):
    chrome.hub.dispatch(chrome.document, "touchstart",
                        TouchEvent(touches=[(start_x, 100)], timestamp=start_ms))
    chrome.hub.dispatch(chrome.document, "touchmove",
                        TouchEvent(touches=[(end_x, 100)], timestamp=start_ms + elapsed_ms))


def _link_tabindexes(chrome):
    return {a["tabindex"] for a in chrome.document.find(id="sidebar").find_all("a")}


@pytest.fixture
def hidden_chrome(page_html, window):
    storage = MemoryStorage({"tdux-sidebar": "hidden"})
    return bind_chrome(load_page(page_html), window=window, storage=storage, hub=EventHub())


@pytest.fixture
def visible_chrome(page_html, window):
    storage = MemoryStorage({"tdux-sidebar": "visible"})
    return bind_chrome(load_page(page_html), window=window, storage=storage, hub=EventHub())


def test_restores_persisted_state(hidden_chrome, visible_chrome):
    assert hidden_chrome.sidebar.state is SidebarState.HIDDEN
    assert _link_tabindexes(hidden_chrome) == {"-1"}
    assert visible_chrome.sidebar.state is SidebarState.VISIBLE
    assert _link_tabindexes(visible_chrome) == {"0"}


def test_toggle_click_round_trip(hidden_chrome):
    sidebar = hidden_chrome.sidebar
    button = hidden_chrome.document.find(id="sidebar-toggle")

    _click(hidden_chrome, button)
    assert sidebar.state is SidebarState.VISIBLE
    assert _link_tabindexes(hidden_chrome) == {"0"}
    assert button["aria-expanded"] == "true"
    assert hidden_chrome.document.find(id="sidebar")["aria-hidden"] == "false"
    assert sidebar.storage.data["tdux-sidebar"] == "visible"

    _click(hidden_chrome, button)
    assert sidebar.state is SidebarState.HIDDEN
    assert _link_tabindexes(hidden_chrome) == {"-1"}
    assert button["aria-expanded"] == "false"
    assert sidebar.storage.data["tdux-sidebar"] == "hidden"


def test_undetermined_state_reads_computed_transform(chrome):
    # Nothing persisted: the stylesheet shows the sidebar on screen (transform: none)
    assert chrome.sidebar.state is None
    _click(chrome, chrome.document.find(id="sidebar-toggle"))
    assert chrome.sidebar.state is SidebarState.HIDDEN


def test_undetermined_state_offscreen_sidebar_opens(chrome):
    set_style_property(chrome.document.find(id="sidebar"), "transform", "translateX(-100%)")
    _click(chrome, chrome.document.find(id="sidebar-toggle"))
    assert chrome.sidebar.state is SidebarState.VISIBLE


def test_reopening_narrow_sidebar_widens_it(hidden_chrome):
    root = hidden_chrome.document.html
    set_style_property(root, "--sidebar-width", "40px")
    _click(hidden_chrome, hidden_chrome.document.find(id="sidebar-toggle"))
    assert get_style_property(root, "--sidebar-width") == "150px"


def test_storage_failures_are_ignored(page_html, window):
    storage = MemoryStorage(fail=True)
    chrome = bind_chrome(load_page(page_html), window=window, storage=storage, hub=EventHub())
    button = chrome.document.find(id="sidebar-toggle")
    _click(chrome, button)
    assert chrome.sidebar.state is SidebarState.HIDDEN
    _click(chrome, button)
    assert chrome.sidebar.state is SidebarState.VISIBLE
    assert storage.data == {}


def test_fast_swipe_from_left_edge_opens(hidden_chrome):
    _swipe(hidden_chrome, 50, 210, elapsed_ms=200)
    assert hidden_chrome.sidebar.state is SidebarState.VISIBLE
    assert hidden_chrome.sidebar.first_contact is None


def test_slow_swipe_is_ignored(hidden_chrome):
    _swipe(hidden_chrome, 50, 210, elapsed_ms=300)
    assert hidden_chrome.sidebar.state is SidebarState.HIDDEN


def test_short_swipe_is_ignored(hidden_chrome):
    _swipe(hidden_chrome, 50, 150, elapsed_ms=100)
    assert hidden_chrome.sidebar.state is SidebarState.HIDDEN


def test_swipe_far_from_edge_is_ignored(hidden_chrome):
    # 25% of a 1000px body is 250px
    _swipe(hidden_chrome, 400, 600, elapsed_ms=100)
    assert hidden_chrome.sidebar.state is SidebarState.HIDDEN


def test_swipe_back_closes(visible_chrome):
    _swipe(visible_chrome, 280, 100, elapsed_ms=120)
    assert visible_chrome.sidebar.state is SidebarState.HIDDEN


def test_touchmove_without_touchstart_does_nothing(hidden_chrome):
    hidden_chrome.hub.dispatch(hidden_chrome.document, "touchmove",
                               TouchEvent(touches=[(500, 0)], timestamp=1))
    assert hidden_chrome.sidebar.state is SidebarState.HIDDEN


def test_resize_drag(visible_chrome):
    hub, window = visible_chrome.hub, visible_chrome.window
    root = visible_chrome.document.html
    handle = visible_chrome.document.find(id="sidebar-resize-handle")

    hub.dispatch(handle, "mousedown", MouseEvent(client_x=300))
    assert visible_chrome.sidebar.state is SidebarState.RESIZING

    hub.dispatch(window, "mousemove", MouseEvent(client_x=240))
    assert get_style_property(root, "--sidebar-width") == "240px"

    # Clamped so 100px of the page stays visible
    hub.dispatch(window, "mousemove", MouseEvent(client_x=980))
    assert get_style_property(root, "--sidebar-width") == "900px"

    hub.dispatch(window, "mouseup", MouseEvent(client_x=980))
    assert visible_chrome.sidebar.state is SidebarState.VISIBLE
    assert hub.listeners(window, "mousemove") == []
    assert hub.listeners(window, "mouseup") == []


def test_resize_below_threshold_hides(visible_chrome):
    hub, window = visible_chrome.hub, visible_chrome.window
    hub.dispatch(visible_chrome.document.find(id="sidebar-resize-handle"), "mousedown", MouseEvent())
    hub.dispatch(window, "mousemove", MouseEvent(client_x=10))
    hub.dispatch(window, "mouseup", MouseEvent(client_x=10))
    assert visible_chrome.sidebar.state is SidebarState.HIDDEN
    assert _link_tabindexes(visible_chrome) == {"-1"}
    assert visible_chrome.sidebar.storage.data["tdux-sidebar"] == "hidden"


def test_dragging_out_reopens_hidden_sidebar(hidden_chrome):
    hub, window = hidden_chrome.hub, hidden_chrome.window
    hub.dispatch(hidden_chrome.document.find(id="sidebar-resize-handle"), "mousedown", MouseEvent())
    hub.dispatch(window, "mousemove", MouseEvent(client_x=200))
    hub.dispatch(window, "mouseup", MouseEvent(client_x=200))
    assert hidden_chrome.sidebar.state is SidebarState.VISIBLE
    assert _link_tabindexes(hidden_chrome) == {"0"}


def test_part_toggle_and_active_section(chrome):
    toggles = chrome.document.select("#sidebar a.toggle")
    first_part = toggles[0].parent
    # Part 1 holds the active module, so it starts expanded
    assert "expanded" in first_part["class"]
    _click(chrome, toggles[0])
    assert "expanded" not in first_part.get("class", [])
    _click(chrome, toggles[1])
    assert "expanded" in toggles[1].parent["class"]

    active = chrome.sidebar.active_section()
    assert active.a["href"] == "#m2"


def test_build_sidebar_flat_list_escapes_text():
    html = build_sidebar([ModuleEntry(1, "A & <B>")], active_id=1)
    soup = load_page(html)
    link = soup.select_one("li.chapter-item.active a")
    assert link.get_text() == "1. A & <B>"
    assert link["href"] == "#m1"
