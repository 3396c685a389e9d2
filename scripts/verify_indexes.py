#!/usr/bin/env python3
"""
verify_indexes.py
Verification of the index files (and optionally a page) in an output directory.

Checks:
- Each of the three index files exists and parses as `var <binding> = <literal>;`.
- The binding inside each file matches its file name.
- Major-module ids are positive and strictly increasing (document order).
- Every module id referenced by the named-module and symbol indexes is positive.
- With --page: the page carries exactly one of each chrome element.
"""

from __future__ import annotations

import argparse
import os
import sys
from pathlib import Path
from typing import List

script_dir = os.path.dirname(os.path.abspath(__file__))
if script_dir not in sys.path:
    sys.path.insert(0, script_dir)

from tdux_weave.index_builder import IndexKind, load_index_file  # noqa: E402
from tdux_weave.page_renderer import validate_page_chrome  # noqa: E402


def _fail(msg: str) -> None:
    raise RuntimeError(msg)


def _check_ids(label: str, ids) -> None:
    for i in ids:
        if i < 1:
            _fail(f"{label}: invalid module id {i}")


def verify_dir(out_dir: Path) -> None:
    for kind in IndexKind:
        path = out_dir / kind.file_name
        if not path.exists():
            _fail(f"Missing {kind.file_name}")
        try:
            loaded_kind, entries = load_index_file(path)
        except ValueError as e:
            _fail(f"{kind.file_name} does not parse: {e}")
        if loaded_kind is not kind:
            _fail(f"{kind.file_name} binds {loaded_kind.binding}, expected {kind.binding}")

        if kind is IndexKind.MAJOR_MODULE:
            ids = [e.id for e in entries]
            _check_ids(kind.file_name, ids)
            for prev, cur in zip(ids, ids[1:]):
                if cur <= prev:
                    _fail(f"{kind.file_name}: module ids out of document order ({prev} then {cur})")
        elif kind is IndexKind.NAMED_MODULE:
            for name, e in entries.items():
                _check_ids(f"{kind.file_name} [{name}]", [e.id, *e.definers, *e.referencers])
        else:
            for text, e in entries.items():
                _check_ids(f"{kind.file_name} [{text}]", [e.defining_module, *e.referencing_modules])


def main(argv: List[str]) -> int:
    ap = argparse.ArgumentParser()
    ap.add_argument("--out-dir", default="html_output")
    ap.add_argument("--page", default=None, help="Rendered page to check for chrome elements")
    args = ap.parse_args(argv)

    out_dir = Path(args.out_dir)
    if not out_dir.exists():
        _fail(f"Output dir missing: {out_dir}")

    verify_dir(out_dir)

    if args.page:
        ok, err = validate_page_chrome(Path(args.page).read_text(encoding="utf-8", errors="ignore"))
        if not ok:
            _fail(f"{args.page}: {err}")

    print("[verify_indexes] PASS")
    return 0


if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))
