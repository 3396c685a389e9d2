#!/usr/bin/env python3
"""
tdux Weave Support Package
==========================

Cross-reference indexes and page chrome for documents rendered through the
tdux LaTeX class and its HTML renderer.

Modules:
    - config: Configuration constants
    - index_builder: Major-module, named-module and symbol indexes
    - markers: \\special{tdux:...} directive builders
    - sidebar: Sidebar HTML and the sidebar state machine
    - contents_modal: Table-of-contents modal
    - page_renderer: HTML chrome and the browser script
    - chrome: Binds the controllers to a rendered page
    - core: Cross-reference dump -> index files pipeline

Usage:
    from tdux_weave import run
    run("xref.json", out_dir="html_output")
"""

__version__ = "0.3.0"


def run(xref_path, out_dir=None, tex_path=None, dest_prefix: str = ""):
    """
    Run the index build pipeline.

    Args:
        xref_path: Cross-reference dump written during document processing.
        out_dir: Directory for the index files (default: html_output).
        tex_path: Optional TeX fragment with provide-file markers.
        dest_prefix: Site subdirectory the index files are provided under.
    """
    from . import core
    return core.main(xref_path, out_dir=out_dir, tex_path=tex_path, dest_prefix=dest_prefix)


def run_with_args(argv=None) -> int:
    """
    Run the index build with command-line arguments.
    This is the CLI entry point.
    """
    import argparse
    import sys
    from pathlib import Path

    parser = argparse.ArgumentParser(
        description="Write the module and symbol index files for a woven document.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    python scripts/run_index_builder.py --xref build/xref.json
    python scripts/run_index_builder.py --xref build/xref.json --out-dir site --tex-fragment build/indexes.tex
        """
    )
    parser.add_argument("--xref", required=True, help="Cross-reference dump (JSON)")
    parser.add_argument("--out-dir", default=None, help="Output directory (default: html_output)")
    parser.add_argument("--tex-fragment", default=None, help="Write provide-file markers to this .tex file")
    parser.add_argument("--dest-prefix", default="", help="Site subdirectory for the index files")

    args = parser.parse_args(argv)
    try:
        run(Path(args.xref),
            out_dir=Path(args.out_dir) if args.out_dir else None,
            tex_path=Path(args.tex_fragment) if args.tex_fragment else None,
            dest_prefix=args.dest_prefix)
    except IndexBuildError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 2
    return 0


# Export key functions and classes for direct imports
from .config import (
    get_output_dir,
)

from .index_builder import (
    IndexBuildError,
    DuplicateOpenError,
    IndexNotOpenError,
    IndexWriteError,
    DuplicateEntryError,
    IndexKind,
    ModuleEntry,
    NamedModuleEntry,
    SymbolEntry,
    IndexBuilder,
    load_index_file,
)

from .utils import (
    escape_text,
    unescape_text,
)

from .sidebar import (
    build_sidebar,
    MemoryStorage,
    SidebarState,
    SidebarController,
)

from .contents_modal import (
    ContentsModalController,
)

from .page_renderer import (
    render_page_html,
    validate_page_chrome,
)

from .chrome import (
    Chrome,
    bind_chrome,
    load_page,
)


__all__ = [
    # Main entry points
    'run',
    'run_with_args',
    # Config
    'get_output_dir',
    # Indexes
    'IndexBuildError',
    'DuplicateOpenError',
    'IndexNotOpenError',
    'IndexWriteError',
    'DuplicateEntryError',
    'IndexKind',
    'ModuleEntry',
    'NamedModuleEntry',
    'SymbolEntry',
    'IndexBuilder',
    'load_index_file',
    'escape_text',
    'unescape_text',
    # Sidebar
    'build_sidebar',
    'MemoryStorage',
    'SidebarState',
    'SidebarController',
    # Contents
    'ContentsModalController',
    # Renderer
    'render_page_html',
    'validate_page_chrome',
    'Chrome',
    'bind_chrome',
    'load_page',
]
