#!/usr/bin/env python3
"""
Page renderer - the HTML chrome the sidebar and contents controllers bind to.
The single source of truth for element ids shared by the Python controllers
and the browser script.
"""
import re
from html import escape

from . import config

REQUIRED_IDS = (
    "sidebar",
    "sidebar-toggle",
    "sidebar-resize-handle",
    "modal-overlay",
    "contents-modal",
    "contents-modal-contents",
    config.MAJOR_MODULE_SCRIPT_ID,
)

CHROME_CSS = f"""
    :root {{ {config.SIDEBAR_WIDTH_PROPERTY}: 300px; }}
    .sidebar {{ position: fixed; left: 0; top: 0; bottom: 0; width: var({config.SIDEBAR_WIDTH_PROPERTY}); overflow-y: auto; }}
    html.sidebar-hidden .sidebar {{ transform: translateX(-100%); }}
    html.sidebar-resizing {{ cursor: col-resize; user-select: none; }}
    .sidebar-resize-handle {{ position: absolute; top: 0; right: 0; bottom: 0; width: 6px; cursor: col-resize; }}
    .section-list {{ display: none; }}
    .part-item.expanded .section-list {{ display: block; }}
    #modal-overlay {{ display: none; }}
    #modal-overlay.modal-overlay-visible {{ display: block; position: fixed; inset: 0; background: rgba(0,0,0,0.4); }}
    #contents-modal {{ display: none; }}
    #contents-modal.modal-container-visible {{ display: block; position: fixed; top: 10vh; left: 50%; transform: translateX(-50%); max-height: 80vh; overflow-y: auto; }}
"""


def chrome_js() -> str:
    """Browser-side twin of SidebarController / ContentsModalController."""
    return f"""
"use strict";

// Fix back button cache problem
window.onunload = function () {{ }};

(function sidebar() {{
  var html = document.querySelector("html");
  var sidebar = document.getElementById("sidebar");
  var sidebarLinks = document.querySelectorAll("#sidebar a");
  var toggleButton = document.getElementById("sidebar-toggle");
  var resizeHandle = document.getElementById("sidebar-resize-handle");
  var firstContact = null;

  function setLinkFocus(value) {{
    Array.from(sidebarLinks).forEach(function (link) {{ link.setAttribute("tabIndex", value); }});
  }}

  function save(value) {{
    try {{ localStorage.setItem("{config.SIDEBAR_STORAGE_KEY}", value); }} catch (e) {{ }}
  }}

  function showSidebar() {{
    html.classList.remove("sidebar-hidden");
    html.classList.add("sidebar-visible");
    setLinkFocus(0);
    toggleButton.setAttribute("aria-expanded", true);
    sidebar.setAttribute("aria-hidden", false);
    save("visible");
  }}

  function hideSidebar() {{
    html.classList.remove("sidebar-visible");
    html.classList.add("sidebar-hidden");
    setLinkFocus(-1);
    toggleButton.setAttribute("aria-expanded", false);
    sidebar.setAttribute("aria-hidden", true);
    save("hidden");
  }}

  try {{
    var saved = localStorage.getItem("{config.SIDEBAR_STORAGE_KEY}");
    if (saved === "visible") showSidebar();
    else if (saved === "hidden") hideSidebar();
  }} catch (e) {{ }}

  Array.from(document.querySelectorAll("#sidebar a.toggle")).forEach(function (el) {{
    el.addEventListener("click", function (ev) {{
      ev.preventDefault();
      ev.currentTarget.parentElement.classList.toggle("expanded");
    }});
  }});

  toggleButton.addEventListener("click", function () {{
    if (html.classList.contains("sidebar-hidden")) {{
      var width = parseInt(html.style.getPropertyValue("{config.SIDEBAR_WIDTH_PROPERTY}"), 10);
      if (width < {config.SIDEBAR_MIN_TOGGLE_WIDTH}) {{
        html.style.setProperty("{config.SIDEBAR_WIDTH_PROPERTY}", "{config.SIDEBAR_MIN_TOGGLE_WIDTH}px");
      }}
      showSidebar();
    }} else if (html.classList.contains("sidebar-visible")) {{
      hideSidebar();
    }} else if (getComputedStyle(sidebar)["transform"] === "none") {{
      hideSidebar();
    }} else {{
      showSidebar();
    }}
  }});

  var lastPos = null;

  function resize(e) {{
    var pos = e.clientX - sidebar.offsetLeft;
    lastPos = pos;
    if (pos < {config.SIDEBAR_HIDE_BELOW}) {{
      if (!html.classList.contains("sidebar-hidden")) hideSidebar();
      return;
    }}
    if (!html.classList.contains("sidebar-visible")) showSidebar();
    pos = Math.min(pos, window.innerWidth - {config.SIDEBAR_RIGHT_MARGIN});
    html.style.setProperty("{config.SIDEBAR_WIDTH_PROPERTY}", pos + "px");
  }}

  function stopResize() {{
    html.classList.remove("sidebar-resizing");
    window.removeEventListener("mousemove", resize, false);
    window.removeEventListener("mouseup", stopResize, false);
  }}

  resizeHandle.addEventListener("mousedown", function () {{
    lastPos = null;
    window.addEventListener("mousemove", resize, false);
    window.addEventListener("mouseup", stopResize, false);
    html.classList.add("sidebar-resizing");
  }}, false);

  document.addEventListener("touchstart", function (e) {{
    firstContact = {{ x: e.touches[0].clientX, time: Date.now() }};
  }}, {{ passive: true }});

  document.addEventListener("touchmove", function (e) {{
    if (!firstContact) return;
    var curX = e.touches[0].clientX;
    var xDiff = curX - firstContact.x, tDiff = Date.now() - firstContact.time;
    if (tDiff < {config.SWIPE_MAX_MS} && Math.abs(xDiff) >= {config.SWIPE_MIN_PX}) {{
      if (xDiff >= 0 && firstContact.x < Math.min(document.body.clientWidth * {config.SWIPE_EDGE_FRACTION}, {config.SWIPE_EDGE_MAX_PX}))
        showSidebar();
      else if (xDiff < 0 && curX < {config.SWIPE_EDGE_MAX_PX})
        hideSidebar();
      firstContact = null;
    }}
  }}, {{ passive: true }});

  var active = sidebar.querySelector(".active");
  if (active) active.scrollIntoView({{ block: "center" }});
}})();

var toggleContents = (function modal() {{
  var overlay = document.getElementById("modal-overlay");
  var contentsModal = document.getElementById("contents-modal");
  var body = document.querySelector("body");
  var savedOverflow = "";

  return function toggleContents() {{
    if (getComputedStyle(contentsModal).display === "none") {{
      overlay.classList.add("modal-overlay-visible");
      contentsModal.classList.add("modal-container-visible");
      savedOverflow = body.style.overflow;
      body.style.overflow = "hidden";
    }} else {{
      overlay.classList.remove("modal-overlay-visible");
      contentsModal.classList.remove("modal-container-visible");
      body.style.overflow = savedOverflow;
      savedOverflow = "";
    }}
  }};
}})();

document.addEventListener("keypress", function (event) {{
  var t = event.target;
  if (t && (/^(INPUT|TEXTAREA|SELECT)$/.test(t.tagName) || t.isContentEditable)) return;
  if (event.key === "{config.CONTENTS_KEY}") toggleContents();
}});

(function majorModuleIndex() {{
  function loaded() {{
    var container = document.getElementById("contents-modal-contents");
    container.innerHTML = "<ul></ul>";
    var ul = container.firstChild;
    Array.from({config.INDEX_FILES["major-module"][1]}).forEach(function (info) {{
      var li = document.createElement("li");
      var a = document.createElement("a");
      a.href = "#m" + info.id;
      a.innerText = info.id + ". " + info.d;
      a.addEventListener("click", toggleContents);
      li.appendChild(a);
      ul.appendChild(li);
    }});
  }}
  document.getElementById("{config.MAJOR_MODULE_SCRIPT_ID}").addEventListener("load", loaded);
}})();
"""


def render_page_html(title: str, body_content: str, sidebar_html: str, index_url: str = "",
                     extra_styles: str = "", body_class: str = "") -> str:
    """
    Unified page renderer - the only function that creates the HTML skeleton.

    Args:
        title: Page title
        body_content: Main content HTML (module anchors are #m<id>)
        sidebar_html: Sidebar navigation HTML (see sidebar.build_sidebar)
        index_url: Directory URL the index data files are served from
        extra_styles: Additional CSS appended after the chrome styles
        body_class: Additional CSS class for body element
    """
    prefix = index_url.rstrip("/") + "/" if index_url else ""
    major_index_src = prefix + config.INDEX_FILES["major-module"][0]
    return f"""<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="utf-8">
    <title>{escape(title)}</title>
    <style>{CHROME_CSS}{extra_styles}</style>
</head>
<body class="{escape(body_class)}">
    <nav class="sidebar" id="sidebar" aria-label="Sidebar">
        <div class="sidebar-resize-handle" id="sidebar-resize-handle"></div>
        {sidebar_html}
    </nav>
    <div class="main-wrapper">
        <header class="top-bar" id="topbar">
            <button id="sidebar-toggle" class="sidebar-toggle" aria-controls="sidebar" aria-expanded="false" title="Toggle sidebar">&#9776;</button>
            <div class="page-title">{escape(title)}</div>
            <button class="contents-button" title="Contents (c)" onclick="toggleContents()">Contents</button>
        </header>
        <main class="content" id="content_area">
            <!-- content-start -->
            {body_content}
            <!-- content-end -->
        </main>
    </div>
    <div id="modal-overlay" onclick="toggleContents()"></div>
    <div id="contents-modal" role="dialog" aria-label="Contents">
        <h2>Contents</h2>
        <div id="contents-modal-contents"><p class="loading">{config.CONTENTS_PLACEHOLDER}</p></div>
    </div>
    <script id="{config.MAJOR_MODULE_SCRIPT_ID}" src="{escape(major_index_src)}" defer></script>
    <script>{chrome_js()}</script>
</body>
</html>"""


def validate_page_chrome(html_content: str) -> tuple:
    """
    Validates that a page carries the chrome the controllers bind to.
    Returns: (is_safe: bool, error_message: str)
    """
    if not html_content:
        return False, "Empty page"

    # Check 1: Each required id exactly once
    for eid in REQUIRED_IDS:
        count = len(re.findall(rf'\bid=["\']{re.escape(eid)}["\']', html_content))
        if count != 1:
            return False, f"Invalid #{eid} count: {count} (expected 1)"

    # Check 2: Content markers present
    if '<!-- content-start -->' not in html_content or '<!-- content-end -->' not in html_content:
        return False, "Missing content markers"

    return True, ""
