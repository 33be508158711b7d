"""
HCL writer — render evaluated attributes and blocks as HCL text.

Output is deterministic for a given input: attributes keep the order they
are given in (callers sort when the source order is undefined), are
aligned on ``=`` within a body and indented by two spaces per level.

    terraform {
      backend "s3" {
        bucket = "state"
        key    = "stacks/app"
      }
    }
"""

from __future__ import annotations

import re
from collections.abc import Mapping, Sequence
from typing import Any

# (type, labels, attributes, nested blocks)
Block = tuple[str, Sequence[str], Mapping[str, Any], Sequence["Block"]]

_INDENT = "  "
_IDENTIFIER = re.compile(r"[A-Za-z_][A-Za-z0-9_-]*")

_ESCAPES = {
    "\\": "\\\\",
    '"': '\\"',
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
}


class HclRenderError(ValueError):
    """Raised when a value or name has no HCL representation."""


def render_body(
    attributes: Mapping[str, Any],
    blocks: Sequence[Block] = (),
    indent: int = 0,
) -> str:
    """Render a body made of attributes followed by blocks.

    ``blocks`` items are ``(type, labels, attributes, nested_blocks)``
    tuples, nested to any depth.  An empty body renders to ``""``.
    """
    return "".join(line + "\n" for line in _body_lines(attributes, blocks, indent))


def render_block(
    block_type: str,
    labels: Sequence[str],
    attributes: Mapping[str, Any],
    blocks: Sequence[Block] = (),
) -> str:
    """Render a single top-level block."""
    return render_body({}, [(block_type, labels, attributes, blocks)])


def _body_lines(
    attributes: Mapping[str, Any],
    blocks: Sequence[Block],
    indent: int,
) -> list[str]:
    lines: list[str] = []
    pad = _INDENT * indent

    if attributes:
        width = max(len(_attribute_name(name)) for name in attributes)
        for name, value in attributes.items():
            rendered = format_value(value, indent)
            lines.append(f"{pad}{name.ljust(width)} = {rendered}")

    for block_type, labels, block_attrs, nested in blocks:
        if lines:
            lines.append("")
        header = " ".join([_attribute_name(block_type), *(_quote(str(label)) for label in labels)])
        lines.append(f"{pad}{header} {{")
        lines.extend(_body_lines(block_attrs, nested, indent + 1))
        lines.append(f"{pad}}}")

    return lines


def format_value(value: Any, indent: int = 0) -> str:
    """Format a Python value as an HCL expression literal."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        if value != value or value in (float("inf"), float("-inf")):
            raise HclRenderError(f"number {value!r} has no HCL representation")
        return repr(value)
    if isinstance(value, str):
        return _quote(value)
    if isinstance(value, Mapping):
        return _format_object(value, indent)
    if isinstance(value, (list, tuple)):
        return "[" + ", ".join(format_value(item, indent) for item in value) + "]"
    raise HclRenderError(f"unsupported value type {type(value).__name__}")


def _format_object(value: Mapping[str, Any], indent: int) -> str:
    if not value:
        return "{}"
    pad = _INDENT * (indent + 1)
    keys = [_object_key(k) for k in value]
    width = max(len(k) for k in keys)
    lines = ["{"]
    for key, item in zip(keys, value.values()):
        lines.append(f"{pad}{key.ljust(width)} = {format_value(item, indent + 1)}")
    lines.append(_INDENT * indent + "}")
    return "\n".join(lines)


def _attribute_name(name: str) -> str:
    if not isinstance(name, str) or not _IDENTIFIER.fullmatch(name):
        raise HclRenderError(f"invalid HCL identifier {name!r}")
    return name


def _object_key(key: Any) -> str:
    key = str(key)
    return key if _IDENTIFIER.fullmatch(key) else _quote(key)


def _quote(value: str) -> str:
    escaped = "".join(_ESCAPES.get(ch, ch) for ch in value)
    # Template sequences must stay literal text
    escaped = escaped.replace("${", "$${").replace("%{", "%%{")
    return f'"{escaped}"'
