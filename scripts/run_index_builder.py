#!/usr/bin/env python3
"""
tdux Index Builder
==================

Writes the major-module, named-module and symbol index files for a woven
document from the cross-reference dump collected during TeX processing.

Usage:
    python run_index_builder.py --xref build/xref.json
    python run_index_builder.py --xref build/xref.json --out-dir site --tex-fragment build/indexes.tex

Outputs:
    - major-module-index.js (contents modal)
    - named-module-index.js
    - symbol-index.js
    - optional TeX fragment with \\special{tdux:provideFile ...} markers
"""

import sys
import os

# Ensure the scripts directory is in the path
script_dir = os.path.dirname(os.path.abspath(__file__))
if script_dir not in sys.path:
    sys.path.insert(0, script_dir)


def main():
    """Main entry point for the index builder."""
    from tdux_weave import run_with_args
    return run_with_args()


if __name__ == "__main__":
    sys.exit(main())
