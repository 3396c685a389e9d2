import json
from pathlib import Path

import pytest

from tdux_weave import config, core, run_with_args
from tdux_weave.index_builder import IndexBuildError, IndexKind, SymbolEntry, load_index_file

XREF = {
    "major_modules": [
        {"id": 1, "description": "Introduction"},
        {"id": 2, "description": 'The "character set"'},
    ],
    "named_modules": [
        {"name": "Global variables", "id": 13, "definers": [13, 20], "referencers": [2]},
    ],
    "symbols": [
        {"text": "buffer", "defining_module": 30, "referencing_modules": [31, 35]},
    ],
}


@pytest.fixture
def xref_path(tmp_path):
    path = tmp_path / "xref.json"
    path.write_text(json.dumps(XREF), encoding="utf-8")
    return path


def test_build_indexes(out_dir):
    artifacts = core.build_indexes(XREF, out_dir)
    assert set(artifacts) == set(IndexKind)
    assert all(p.exists() for p in artifacts.values())

    _, symbols = load_index_file(artifacts[IndexKind.SYMBOL])
    assert symbols == {"buffer": SymbolEntry(30, (31, 35))}
    _, majors = load_index_file(artifacts[IndexKind.MAJOR_MODULE])
    assert [m.description for m in majors] == ["Introduction", 'The "character set"']


def test_load_xref_defaults_missing_sections(tmp_path):
    path = tmp_path / "xref.json"
    path.write_text('{"major_modules": []}', encoding="utf-8")
    assert core.load_xref(path) == {"major_modules": [], "named_modules": [], "symbols": []}


@pytest.mark.parametrize("content", ["not json", "[1, 2]"])
def test_load_xref_rejects_bad_dump(tmp_path, content):
    path = tmp_path / "xref.json"
    path.write_text(content, encoding="utf-8")
    with pytest.raises(IndexBuildError):
        core.load_xref(path)


def test_malformed_record_aborts_whole_build(out_dir):
    xref = dict(XREF, named_modules=[{"name": "No id here"}])
    with pytest.raises(IndexBuildError, match="Malformed named-module record #0"):
        core.build_indexes(xref, out_dir)
    assert not list(out_dir.iterdir())


def test_failed_rebuild_keeps_previous_run(out_dir):
    core.build_indexes(XREF, out_dir)
    before = {p.name: p.read_text(encoding="utf-8") for p in out_dir.iterdir()}

    xref = {
        "major_modules": [{"id": 2, "description": "New2"}],
        "named_modules": [{"name": "Broken"}],
        "symbols": [],
    }
    with pytest.raises(IndexBuildError):
        core.build_indexes(xref, out_dir)

    after = {p.name: p.read_text(encoding="utf-8") for p in out_dir.iterdir()}
    assert after == before
    _, majors = load_index_file(out_dir / "major-module-index.js")
    assert [m.description for m in majors] == ["Introduction", 'The "character set"']


def test_main_writes_tex_fragment(xref_path, tmp_path):
    site = tmp_path / "site"
    tex = tmp_path / "indexes.tex"
    core.main(xref_path, out_dir=site, tex_path=tex, dest_prefix="assets")

    assert (site / "symbol-index.js").exists()
    # The per-run directory does not leak into the package default.
    assert config.get_output_dir() == Path("html_output")
    fragment = tex.read_text(encoding="utf-8")
    assert f"\\special{{tdux:provideFile {(site / 'symbol-index.js').as_posix()} assets/symbol-index.js}}" in fragment
    assert "\\special{tdux:setTemplateVariable tduxMajorModuleIndex assets/major-module-index.js}" in fragment
    assert fragment.count("tdux:provideFile") == 3


def test_cli(xref_path, tmp_path, capsys):
    site = tmp_path / "site"
    assert run_with_args(["--xref", str(xref_path), "--out-dir", str(site)]) == 0
    assert (site / "named-module-index.js").exists()
    assert "--> Writing indexes" in capsys.readouterr().out


def test_cli_reports_fatal_errors(tmp_path, capsys):
    assert run_with_args(["--xref", str(tmp_path / "missing.json"), "--out-dir", str(tmp_path)]) == 2
    assert capsys.readouterr().err.startswith("ERROR:")
