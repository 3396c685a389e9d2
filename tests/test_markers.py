import pytest

from tdux_weave import markers
from tdux_weave.markers import Marker, MarkerError


def test_directives():
    assert markers.register_template("page.html") == r"\special{tdux:addTemplate page.html}"
    assert markers.set_template("page.html") == r"\special{tdux:setTemplate page.html}"
    assert markers.set_output_path("index.html") == r"\special{tdux:setOutputPath index.html}"
    assert markers.emit() == r"\special{tdux:emit}"
    assert markers.set_template_variable("tduxTitle", "tex.web") == \
        r"\special{tdux:setTemplateVariable tduxTitle tex.web}"
    assert markers.provide_file("build/symbol-index.js", "symbol-index.js") == \
        r"\special{tdux:provideFile build/symbol-index.js symbol-index.js}"
    assert markers.format_end("span") == r"\special{tdux:me span}"
    assert markers.direct_text("&nbsp;") == r"\special{tdux:dt &nbsp;}"


def test_format_start_attributes_keep_order():
    out = markers.format_start("span", [("class", "kw"), ("data-x", "1")])
    assert out == r'\special{tdux:mfs span class="kw" data-x="1"}'
    assert markers.format_start("p") == r"\special{tdux:mfs p}"


def test_module_anchor_targets_contents_links():
    anchor = markers.module_anchor(12)
    assert 'id="m12"' in anchor
    assert anchor.startswith(r"\special{tdux:mfs a ")
    assert anchor.endswith(r"\special{tdux:me a}")


@pytest.mark.parametrize("call", [
    lambda: markers.direct_text("{"),
    lambda: markers.provide_file("a}", "b"),
    lambda: markers.format_start("a", {"title": 'say "hi"'}),
    lambda: markers.set_template_variable("two words", "x"),
])
def test_rejects_unsafe_arguments(call):
    with pytest.raises(MarkerError):
        call()


def test_every_marker_has_a_distinct_directive():
    names = [m.value for m in Marker]
    assert len(names) == len(set(names)) == 9
