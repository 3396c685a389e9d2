import pytest

from tdux_weave import bind_chrome, build_sidebar, load_page, render_page_html
from tdux_weave.events import EventHub, Window
from tdux_weave.index_builder import IndexBuilder, ModuleEntry
from tdux_weave.sidebar import MemoryStorage


@pytest.fixture
def out_dir(tmp_path):
    path = tmp_path / "html_output"
    path.mkdir()
    return path


@pytest.fixture
def builder(out_dir):
    return IndexBuilder(out_dir)


@pytest.fixture
def modules():
    return [ModuleEntry(1, "Intro"), ModuleEntry(2, "Setup"), ModuleEntry(5, "Main loop")]


@pytest.fixture
def page_html(modules):
    sidebar_html = build_sidebar(modules, active_id=2,
                                 parts=[("Part 1", modules[:2]), ("Part 2", modules[2:])])
    body = "".join(f'<h2><a id="m{m.id}"></a>{m.description}</h2>' for m in modules)
    return render_page_html("Weave", body, sidebar_html)


@pytest.fixture
def storage():
    return MemoryStorage()


@pytest.fixture
def window():
    return Window(inner_width=1000, body_client_width=1000)


@pytest.fixture
def chrome(page_html, storage, window):
    return bind_chrome(load_page(page_html), window=window, storage=storage, hub=EventHub())
