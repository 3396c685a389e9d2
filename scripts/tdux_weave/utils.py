#!/usr/bin/env python3
"""
Utility functions for index serialization.
Includes text escaping for embedded literals and data-file parsing.
"""
import json
import re


def escape_text(text: str) -> str:
    """
    Escape text for embedding inside a double-quoted script literal.
    Example: 'say "hi"' -> 'say \\"hi\\"'
    """
    if not text:
        return ""
    # json.dumps quotes the value; strip the surrounding quotes.
    return json.dumps(text, ensure_ascii=False)[1:-1]


def unescape_text(escaped: str) -> str:
    """Inverse of escape_text."""
    if not escaped:
        return ""
    return json.loads(f'"{escaped}"')


def quoted(escaped: str) -> str:
    """Wrap already-escaped text in double quotes."""
    return f'"{escaped}"'


_BINDING_RE = re.compile(r'^\s*var\s+([A-Za-z_$][\w$]*)\s*=\s*(.*?);?\s*$', re.DOTALL)


def parse_binding(source: str) -> tuple:
    """
    Parse a generated data file.
    Returns: (binding_name: str, value: list | dict)
    Raises ValueError if the file is not a single `var X = literal;` statement.
    """
    m = _BINDING_RE.match(source)
    if not m:
        raise ValueError("Not a data file: expected `var <name> = <literal>;`")
    name, literal = m.groups()
    try:
        value = json.loads(literal)
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid literal for {name}: {e}") from e
    return name, value
