# Created by Matthew Valancy
# Copyright 2026 Valpatel Software LLC
# Licensed under AGPL-3.0 — see LICENSE for details.
"""Placeholder grammar shared by looping variables and component properties.

A placeholder is a whole value of the form ``${name}`` or
``${name}:default``.  Names start with a letter and may contain dashed,
underscored or dotted segments (``radio.tx-power``).  Surrounding
whitespace is ignored.  Anything that does not match is a literal.
"""

from __future__ import annotations

import re
from typing import Any, Mapping, NamedTuple

from swarmsim.errors import ConfigurationError

_NAME = r"[a-zA-Z][a-zA-Z0-9]*(?:[-_.][a-zA-Z0-9]+)*"
_PLACEHOLDER_RE = re.compile(r"^\s*\$\{(" + _NAME + r")\}(?::(.+?))?\s*$")
_NAME_RE = re.compile(r"^" + _NAME + r"$")


class Placeholder(NamedTuple):
    name: str
    default: str | None


def parse_placeholder(text: Any) -> Placeholder | None:
    """Return the placeholder in *text*, or None when it is a literal."""
    if not isinstance(text, str):
        return None
    match = _PLACEHOLDER_RE.match(text)
    if match is None:
        return None
    return Placeholder(match.group(1), match.group(2))


def is_placeholder(text: Any) -> bool:
    return parse_placeholder(text) is not None


def is_valid_name(name: str) -> bool:
    return bool(_NAME_RE.match(name))


def resolve_value(text: Any, bindings: Mapping[str, str]) -> Any:
    """Substitute *text* against *bindings*.

    Literals come back unchanged.  A placeholder yields the bound value,
    falling back to its default.  Raises KeyError with the placeholder
    name when neither exists; callers translate that into the error type
    appropriate for their layer.
    """
    placeholder = parse_placeholder(text)
    if placeholder is None:
        return text
    if placeholder.name in bindings:
        return bindings[placeholder.name]
    if placeholder.default is not None:
        return placeholder.default
    raise KeyError(placeholder.name)


def resolve_properties(
    properties: Mapping[str, Any],
    bindings: Mapping[str, str],
) -> dict[str, Any]:
    """Resolve every placeholder value in a component property mapping.

    Nested mappings and lists are walked.  *bindings* is usually
    ``variation.parameters``.
    """

    def _walk(key: str, value: Any) -> Any:
        if isinstance(value, Mapping):
            return {k: _walk(f"{key}.{k}", v) for k, v in value.items()}
        if isinstance(value, (list, tuple)):
            return [_walk(f"{key}[{i}]", v) for i, v in enumerate(value)]
        try:
            return resolve_value(value, bindings)
        except KeyError as exc:
            raise ConfigurationError(
                f"property '{key}' references unset variable '{exc.args[0]}' "
                f"and declares no default"
            ) from None

    return {key: _walk(key, value) for key, value in properties.items()}
