#!/usr/bin/env python3
"""
Index Builder
=============

Accumulates the three cross-reference tables collected while a woven
document is processed and writes each one as a script-embedded data file:

    major-module-index.js   var ttWeaveMajorModuleIndex = [{"id": 1, "d": "Intro"}, ...];
    named-module-index.js   var ttWeaveNamedModuleIndex = {"name": {"id": 3, "df": [..], "rf": [..]}, ...};
    symbol-index.js         var ttWeaveSymbolIndex = {"text": {"df": 4, "rf": [..]}, ...};

Every literal is valid JSON as well as valid JavaScript, so the same files
are loaded by a <script> tag in the browser and by `load_index_file` here.

Each sink streams into `<name>.tmp` while its scope is open and is renamed
into place on close. A failed scope discards the temporary file, so an
artifact on disk is always complete. Inside `IndexBuilder.transaction()`
the renames wait until every index has closed, so the three files on disk
always come from the same run.
"""
from __future__ import annotations

import json
import os
from contextlib import contextmanager
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from types import MappingProxyType
from typing import Dict, Iterable, Iterator, List, Optional, Tuple, Union

from . import config
from .utils import escape_text, parse_binding, quoted


# ----------------------------
# Errors
# ----------------------------

class IndexBuildError(RuntimeError):
    """Fatal to document processing: cross-reference integrity is lost."""


class DuplicateOpenError(IndexBuildError):
    pass


class IndexNotOpenError(IndexBuildError):
    pass


class IndexWriteError(IndexBuildError):
    pass


class DuplicateEntryError(IndexBuildError):
    pass


# ----------------------------
# Data Model
# ----------------------------

class IndexKind(Enum):
    MAJOR_MODULE = "major-module"
    NAMED_MODULE = "named-module"
    SYMBOL = "symbol"

    @property
    def file_name(self) -> str:
        return config.INDEX_FILES[self.value][0]

    @property
    def binding(self) -> str:
        return config.INDEX_FILES[self.value][1]

    @property
    def is_mapping(self) -> bool:
        return self is not IndexKind.MAJOR_MODULE

    @classmethod
    def from_binding(cls, binding: str) -> "IndexKind":
        for kind in cls:
            if kind.binding == binding:
                return kind
        raise ValueError(f"Unknown index binding: {binding}")


def _id_list(ids: Iterable[int]) -> Tuple[int, ...]:
    return tuple(int(i) for i in ids)


@dataclass(frozen=True)
class ModuleEntry:
    id: int
    description: str

    def to_literal(self) -> str:
        return f'{{"id": {self.id}, "d": {quoted(escape_text(self.description))}}}'

    @classmethod
    def from_literal(cls, value: dict) -> "ModuleEntry":
        return cls(id=int(value["id"]), description=value["d"])


@dataclass(frozen=True)
class NamedModuleEntry:
    id: int
    definers: Tuple[int, ...] = ()
    referencers: Tuple[int, ...] = ()

    def to_literal(self) -> str:
        return (f'{{"id": {self.id}, "df": {json.dumps(list(self.definers))}, '
                f'"rf": {json.dumps(list(self.referencers))}}}')

    @classmethod
    def from_literal(cls, value: dict) -> "NamedModuleEntry":
        return cls(id=int(value["id"]), definers=_id_list(value.get("df", [])),
                   referencers=_id_list(value.get("rf", [])))


@dataclass(frozen=True)
class SymbolEntry:
    defining_module: int
    referencing_modules: Tuple[int, ...] = ()

    def to_literal(self) -> str:
        return f'{{"df": {self.defining_module}, "rf": {json.dumps(list(self.referencing_modules))}}}'

    @classmethod
    def from_literal(cls, value: dict) -> "SymbolEntry":
        return cls(defining_module=int(value["df"]),
                   referencing_modules=_id_list(value.get("rf", [])))


Entries = Union[List[ModuleEntry], Dict[str, NamedModuleEntry], Dict[str, SymbolEntry]]


# ----------------------------
# Sink
# ----------------------------

class IndexSink:
    """
    Output destination for one index kind, open for one scope.

    Entries are kept in memory (for lookups and tests) and streamed to the
    temporary file as they are recorded.
    """

    def __init__(self, kind: IndexKind, out_dir: Path):
        self.kind = kind
        self.path = Path(out_dir) / kind.file_name
        self.tmp_path = self.path.with_name(self.path.name + ".tmp")
        self.entries: Entries = {} if kind.is_mapping else []
        self.closed = False
        self._first = True
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self._handle = open(self.tmp_path, "w", encoding="utf-8")
        except OSError as e:
            raise IndexWriteError(f"Cannot open {self.tmp_path}: {e}") from e
        self._write(f"var {kind.binding} = {'{' if kind.is_mapping else '['}\n")

    def _write(self, text: str) -> None:
        try:
            self._handle.write(text)
        except OSError as e:
            raise IndexWriteError(f"Failed writing {self.tmp_path.name}: {e}") from e

    def append(self, key: Optional[str], entry) -> None:
        if self.closed:
            raise IndexNotOpenError(f"{self.kind.value} index is already closed")
        if self.kind.is_mapping:
            line = f"{quoted(key)}: {entry.to_literal()}"
            self.entries[key] = entry
        else:
            line = entry.to_literal()
            self.entries.append(entry)
        self._write(("" if self._first else ",\n") + line)
        self._first = False

    def _release(self) -> None:
        handle, self._handle = self._handle, None
        if handle is None:
            return
        try:
            handle.close()
        except OSError as e:
            raise IndexWriteError(f"Failed flushing {self.tmp_path.name}: {e}") from e

    def discard(self) -> None:
        """Drop the temporary file. Safe after `finish`."""
        self.closed = True
        try:
            self._release()
        finally:
            self.tmp_path.unlink(missing_ok=True)

    def finish(self) -> None:
        """Terminate the literal and flush `<name>.tmp`; the final name is untouched."""
        if self.closed:
            raise IndexNotOpenError(f"{self.kind.value} index is already closed")
        self.closed = True
        try:
            self._write(f"\n{'}' if self.kind.is_mapping else ']'};\n")
            self._release()
        except IndexWriteError:
            self.discard()
            raise

    def commit(self) -> Path:
        """Rename a finished temporary file into place."""
        try:
            os.replace(self.tmp_path, self.path)
        except OSError as e:
            self.tmp_path.unlink(missing_ok=True)
            raise IndexWriteError(f"Cannot finalize {self.path}: {e}") from e
        return self.path

    def close(self, discard: bool = False) -> Optional[Path]:
        """Finalize the artifact (or discard it). Returns the artifact path."""
        if self.closed:
            raise IndexNotOpenError(f"{self.kind.value} index is already closed")
        if discard:
            self.discard()
            return None
        self.finish()
        return self.commit()


# ----------------------------
# Builder
# ----------------------------

class IndexBuilder:
    """Owns the three index sinks for one document-processing run."""

    def __init__(self, out_dir: Optional[Path] = None):
        self.out_dir = Path(out_dir) if out_dir is not None else config.get_output_dir()
        self._open: Dict[IndexKind, IndexSink] = {}
        self._finished: Dict[IndexKind, IndexSink] = {}
        self._staged: Optional[List[IndexSink]] = None

    def open_index(self, kind: IndexKind) -> IndexSink:
        if kind in self._open:
            raise DuplicateOpenError(f"{kind.value} index is already open")
        sink = IndexSink(kind, self.out_dir)
        self._open[kind] = sink
        return sink

    def close_index(self, kind: IndexKind, discard: bool = False) -> Optional[Path]:
        sink = self._open.pop(kind, None)
        if sink is None:
            raise IndexNotOpenError(f"{kind.value} index is not open")
        self._finished[kind] = sink
        if discard or self._staged is None:
            return sink.close(discard=discard)
        sink.finish()
        self._staged.append(sink)
        return sink.path

    @contextmanager
    def index(self, kind: IndexKind) -> Iterator[IndexSink]:
        """Scoped sink: always released, artifact kept only on success."""
        self.open_index(kind)
        try:
            yield self._open[kind]
        except BaseException:
            self.close_index(kind, discard=True)
            raise
        self.close_index(kind)

    @contextmanager
    def transaction(self) -> Iterator["IndexBuilder"]:
        """
        All-or-nothing build: indexes closed inside the block stay as
        `<name>.tmp` and are renamed into place together when it succeeds.
        On failure every staged file is discarded and the previous
        artifacts are left as they were.
        """
        if self._staged is not None:
            raise IndexBuildError("Index transaction already in progress")
        self._staged = []
        try:
            yield self
        except BaseException:
            staged, self._staged = self._staged, None
            for kind in list(self._open):
                self.close_index(kind, discard=True)
            for sink in staged:
                sink.discard()
            raise
        staged, self._staged = self._staged, None
        for n, sink in enumerate(staged):
            try:
                sink.commit()
            except IndexWriteError:
                for rest in staged[n + 1:]:
                    rest.discard()
                raise

    def is_open(self, kind: IndexKind) -> bool:
        return kind in self._open

    def _sink(self, kind: IndexKind) -> IndexSink:
        try:
            return self._open[kind]
        except KeyError:
            raise IndexNotOpenError(f"{kind.value} index is not open") from None

    # --- recording ---

    def record_major_module(self, id: int, description: str) -> ModuleEntry:
        entry = ModuleEntry(int(id), description)
        self._sink(IndexKind.MAJOR_MODULE).append(None, entry)
        return entry

    def record_named_module(self, name: str, id: int, definer_ids: Iterable[int] = (),
                            referencer_ids: Iterable[int] = ()) -> NamedModuleEntry:
        sink = self._sink(IndexKind.NAMED_MODULE)
        key = escape_text(name)
        if key in sink.entries:
            raise DuplicateEntryError(f"Named module recorded twice: {name!r}")
        entry = NamedModuleEntry(int(id), _id_list(definer_ids), _id_list(referencer_ids))
        sink.append(key, entry)
        return entry

    def record_symbol(self, text: str, defining_module_id: int,
                      referencer_ids: Iterable[int] = ()) -> SymbolEntry:
        sink = self._sink(IndexKind.SYMBOL)
        key = escape_text(text)
        entry = SymbolEntry(int(defining_module_id), _id_list(referencer_ids))
        previous = sink.entries.get(key)
        if previous is not None:
            # Last write wins, both in this mapping and when the browser parses the literal.
            print(f"  Warning: symbol {text!r} redefined "
                  f"(module {previous.defining_module} -> {entry.defining_module})")
        sink.append(key, entry)
        return entry

    # --- read access ---

    def _entries(self, kind: IndexKind) -> Entries:
        sink = self._open.get(kind) or self._finished.get(kind)
        if sink is None:
            return {} if kind.is_mapping else []
        return sink.entries

    @property
    def major_modules(self) -> Tuple[ModuleEntry, ...]:
        return tuple(self._entries(IndexKind.MAJOR_MODULE))

    @property
    def named_modules(self):
        """Named-module mapping keyed by escaped module name (read-only view)."""
        return MappingProxyType(self._entries(IndexKind.NAMED_MODULE))

    @property
    def symbols(self):
        """Symbol mapping keyed by escaped symbol text (read-only view)."""
        return MappingProxyType(self._entries(IndexKind.SYMBOL))

    def lookup_symbol(self, text: str) -> Optional[SymbolEntry]:
        return self.symbols.get(escape_text(text))


def load_index_file(path: Path) -> Tuple[IndexKind, Entries]:
    """
    Read a generated data file back into entries.
    Mapping keys come back unescaped (the literal parser decodes them).
    """
    binding, value = parse_binding(Path(path).read_text(encoding="utf-8"))
    kind = IndexKind.from_binding(binding)
    if kind is IndexKind.MAJOR_MODULE:
        return kind, [ModuleEntry.from_literal(v) for v in value]
    entry_cls = NamedModuleEntry if kind is IndexKind.NAMED_MODULE else SymbolEntry
    return kind, {k: entry_cls.from_literal(v) for k, v in value.items()}


__all__ = [
    "IndexBuildError",
    "DuplicateOpenError",
    "IndexNotOpenError",
    "IndexWriteError",
    "DuplicateEntryError",
    "IndexKind",
    "ModuleEntry",
    "NamedModuleEntry",
    "SymbolEntry",
    "IndexSink",
    "IndexBuilder",
    "load_index_file",
]
