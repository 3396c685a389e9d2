#!/usr/bin/env python3
"""
Index build pipeline.

Reads the cross-reference dump collected while the document was processed,
writes the three index data files, and optionally a TeX fragment with the
provide-file markers that ship them next to the rendered HTML.

Dump format (JSON):
    {
      "major_modules": [{"id": 1, "description": "Intro"}, ...],
      "named_modules": [{"name": "Declare globals", "id": 3, "definers": [3], "referencers": [1, 7]}, ...],
      "symbols":       [{"text": "buffer", "defining_module": 4, "referencing_modules": [5, 9]}, ...]
    }
"""
import json
from pathlib import Path
from typing import Dict, Optional

from tqdm import tqdm

from . import markers
from .index_builder import IndexBuildError, IndexBuilder, IndexKind


def load_xref(path: Path) -> dict:
    """Load the cross-reference dump. Missing sections are treated as empty."""
    path = Path(path)
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except OSError as e:
        raise IndexBuildError(f"Cannot read cross-reference dump {path}: {e}") from e
    except json.JSONDecodeError as e:
        raise IndexBuildError(f"Invalid cross-reference dump {path}: {e}") from e
    if not isinstance(data, dict):
        raise IndexBuildError(f"Cross-reference dump must be an object: {path}")
    for key in ("major_modules", "named_modules", "symbols"):
        data.setdefault(key, [])
    return data


def _record_all(builder: IndexBuilder, kind: IndexKind, records: list, record_fn) -> None:
    with builder.index(kind):
        for n, rec in enumerate(tqdm(records, desc=kind.file_name, unit="entry", leave=False)):
            try:
                record_fn(rec)
            except (KeyError, TypeError, ValueError) as e:
                raise IndexBuildError(f"Malformed {kind.value} record #{n}: {rec!r} ({e})") from e


def build_indexes(xref: dict, out_dir: Optional[Path] = None) -> Dict[IndexKind, Path]:
    """Write all three index files. Returns kind -> artifact path."""
    builder = IndexBuilder(out_dir)
    print(f"--> Writing indexes to {builder.out_dir}")

    # A failure in any index leaves every previous artifact untouched.
    with builder.transaction():
        _record_all(builder, IndexKind.MAJOR_MODULE, xref["major_modules"],
                    lambda r: builder.record_major_module(r["id"], r["description"]))
        _record_all(builder, IndexKind.NAMED_MODULE, xref["named_modules"],
                    lambda r: builder.record_named_module(r["name"], r["id"],
                                                          r.get("definers", []), r.get("referencers", [])))
        _record_all(builder, IndexKind.SYMBOL, xref["symbols"],
                    lambda r: builder.record_symbol(r["text"], r["defining_module"],
                                                    r.get("referencing_modules", [])))

    print(f"  {len(builder.major_modules)} major modules, "
          f"{len(builder.named_modules)} named modules, {len(builder.symbols)} symbols")
    return {kind: builder.out_dir / kind.file_name for kind in IndexKind}


def tex_fragment(artifacts: Dict[IndexKind, Path], dest_prefix: str = "") -> str:
    """TeX lines that have the renderer copy each index file into the site."""
    prefix = dest_prefix.rstrip("/") + "/" if dest_prefix else ""
    lines = ["% Generated by tdux_weave; ships the module indexes with the HTML output."]
    for kind, path in artifacts.items():
        lines.append(markers.provide_file(path.as_posix(), prefix + path.name))
    major = artifacts.get(IndexKind.MAJOR_MODULE)
    if major is not None:
        lines.append(markers.set_template_variable("tduxMajorModuleIndex", prefix + major.name))
    return "\n".join(lines) + "\n"


def main(xref_path: Path, out_dir: Optional[Path] = None, tex_path: Optional[Path] = None,
         dest_prefix: str = "") -> Dict[IndexKind, Path]:
    xref = load_xref(xref_path)
    artifacts = build_indexes(xref, out_dir)
    for path in artifacts.values():
        print(f"  Wrote {path}")

    if tex_path is not None:
        tex_path = Path(tex_path)
        tex_path.write_text(tex_fragment(artifacts, dest_prefix), encoding="utf-8")
        print(f"--> TeX fragment: {tex_path}")
    return artifacts
