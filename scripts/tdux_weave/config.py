#!/usr/bin/env python3
"""
Weave configuration constants.
Shared across the index builder, marker emitter and chrome controllers.
"""
from pathlib import Path

# --- CONFIGURATION ---
OUTPUT_DIR = Path("html_output")  # Default; --out-dir overrides per run

# --- INDEX ARTIFACTS ---
# kind -> (file name, global JS binding)
INDEX_FILES = {
    "major-module": ("major-module-index.js", "ttWeaveMajorModuleIndex"),
    "named-module": ("named-module-index.js", "ttWeaveNamedModuleIndex"),
    "symbol": ("symbol-index.js", "ttWeaveSymbolIndex"),
}
MAJOR_MODULE_SCRIPT_ID = "major-module-index-script"

# --- SIDEBAR ---
SIDEBAR_STORAGE_KEY = "tdux-sidebar"
SIDEBAR_WIDTH_PROPERTY = "--sidebar-width"
SIDEBAR_MIN_TOGGLE_WIDTH = 150   # Widen to this when re-opening a collapsed panel
SIDEBAR_HIDE_BELOW = 20          # Drag position that collapses the panel
SIDEBAR_RIGHT_MARGIN = 100       # Keep this much of the page visible while resizing

# --- TOUCH GESTURES ---
SWIPE_MAX_MS = 250
SWIPE_MIN_PX = 150
SWIPE_EDGE_FRACTION = 0.25
SWIPE_EDGE_MAX_PX = 300

# --- CONTENTS MODAL ---
CONTENTS_KEY = "c"
CONTENTS_PLACEHOLDER = "Loading…"


def get_output_dir() -> Path:
    """Default output directory, used when no --out-dir is given."""
    return OUTPUT_DIR
