#!/usr/bin/env python3
r"""
tdux marker protocol.
Builds the \special{tdux:...} directives the HTML renderer consumes.
"""
from enum import Enum
from typing import Iterable, Mapping, Optional, Tuple, Union

Attributes = Union[Mapping[str, str], Iterable[Tuple[str, str]]]


class MarkerError(ValueError):
    pass


class Marker(Enum):
    REGISTER_TEMPLATE = "addTemplate"
    SET_TEMPLATE = "setTemplate"
    SET_OUTPUT_PATH = "setOutputPath"
    EMIT = "emit"
    SET_TEMPLATE_VARIABLE = "setTemplateVariable"
    PROVIDE_FILE = "provideFile"
    FORMAT_START = "mfs"
    FORMAT_END = "me"
    DIRECT_TEXT = "dt"


def _check_arg(arg: str) -> str:
    # An unbalanced brace would end the \special early.
    if "{" in arg or "}" in arg:
        raise MarkerError(f"Braces are not allowed in marker arguments: {arg!r}")
    return arg


def special(marker: Marker, *args: str) -> str:
    """Render one directive: \\special{tdux:<name> <args...>}"""
    parts = [f"tdux:{marker.value}"]
    parts.extend(_check_arg(str(a)) for a in args if a != "")
    return "\\special{" + " ".join(parts) + "}"


def format_attributes(attrs: Optional[Attributes]) -> str:
    """Render an attribute list as name="value" pairs (insertion order)."""
    if not attrs:
        return ""
    items = attrs.items() if isinstance(attrs, Mapping) else attrs
    out = []
    for name, value in items:
        if '"' in str(value):
            raise MarkerError(f"Attribute {name} contains a double quote")
        out.append(f'{name}="{value}"')
    return " ".join(out)


def register_template(name: str) -> str:
    return special(Marker.REGISTER_TEMPLATE, name)


def set_template(name: str) -> str:
    return special(Marker.SET_TEMPLATE, name)


def set_output_path(path: str) -> str:
    return special(Marker.SET_OUTPUT_PATH, path)


def emit() -> str:
    return special(Marker.EMIT)


def set_template_variable(name: str, value: str) -> str:
    if not name or " " in name:
        raise MarkerError(f"Invalid template variable name: {name!r}")
    return special(Marker.SET_TEMPLATE_VARIABLE, name, value)


def provide_file(source: str, dest: str) -> str:
    return special(Marker.PROVIDE_FILE, source, dest)


def format_start(tag: str, attrs: Optional[Attributes] = None) -> str:
    return special(Marker.FORMAT_START, tag, format_attributes(attrs))


def format_end(tag: str) -> str:
    return special(Marker.FORMAT_END, tag)


def direct_text(text: str) -> str:
    return special(Marker.DIRECT_TEXT, text)


def module_anchor(module_id: int) -> str:
    """Anchor that contents links (#m<id>) point at."""
    return format_start("a", {"id": f"m{int(module_id)}", "class": "module-anchor"}) + format_end("a")
