#!/usr/bin/env python3
"""
Computed-style resolution for the page chrome.

A deliberately small cascade: rules apply in declaration order (no
specificity), then the element's inline style attribute wins. Selectors are
matched with soupsieve through BeautifulSoup's `Tag.css` API.
"""
from typing import Dict, List, Tuple

from bs4 import Tag

Declarations = Dict[str, str]

DEFAULT_RULES: List[Tuple[str, Declarations]] = [
    ("#sidebar", {"transform": "none"}),
    ("html.sidebar-hidden #sidebar", {"transform": "translateX(-100%)"}),
    ("#modal-overlay", {"display": "none"}),
    ("#modal-overlay.modal-overlay-visible", {"display": "block"}),
    ("#contents-modal", {"display": "none"}),
    ("#contents-modal.modal-container-visible", {"display": "block"}),
]


def has_class(tag: Tag, name: str) -> bool:
    return name in tag.get("class", [])


def add_class(tag: Tag, name: str) -> None:
    classes = list(tag.get("class", []))
    if name not in classes:
        classes.append(name)
    tag["class"] = classes


def remove_class(tag: Tag, name: str) -> None:
    classes = [c for c in tag.get("class", []) if c != name]
    if classes:
        tag["class"] = classes
    elif tag.has_attr("class"):
        del tag["class"]


def toggle_class(tag: Tag, name: str) -> bool:
    """Returns True when the class is now present."""
    if has_class(tag, name):
        remove_class(tag, name)
        return False
    add_class(tag, name)
    return True


def parse_style(style: str) -> Declarations:
    """'a: 1; --b: 2px' -> {'a': '1', '--b': '2px'}"""
    decls = {}
    for part in (style or "").split(";"):
        if ":" not in part:
            continue
        name, value = part.split(":", 1)
        name = name.strip()
        if name:
            decls[name] = value.strip()
    return decls


def format_style(decls: Declarations) -> str:
    return "; ".join(f"{k}: {v}" for k, v in decls.items())


def get_style_property(tag: Tag, name: str) -> str:
    """element.style.getPropertyValue(name); empty string when unset."""
    return parse_style(tag.get("style", "")).get(name, "")


def set_style_property(tag: Tag, name: str, value: str) -> None:
    decls = parse_style(tag.get("style", ""))
    decls[name] = value
    tag["style"] = format_style(decls)


def remove_style_property(tag: Tag, name: str) -> None:
    decls = parse_style(tag.get("style", ""))
    decls.pop(name, None)
    if decls:
        tag["style"] = format_style(decls)
    elif tag.has_attr("style"):
        del tag["style"]


class StyleSheet:
    """Resolves getComputedStyle() for elements of a parsed page."""

    def __init__(self, rules=None):
        self.rules: List[Tuple[str, Declarations]] = list(DEFAULT_RULES if rules is None else rules)

    def add_rule(self, selector: str, declarations: Declarations) -> None:
        self.rules.append((selector, dict(declarations)))

    def computed_style(self, tag: Tag) -> Declarations:
        computed: Declarations = {}
        for selector, decls in self.rules:
            if tag.css.match(selector):
                computed.update(decls)
        computed.update(parse_style(tag.get("style", "")))
        return computed

    __call__ = computed_style
