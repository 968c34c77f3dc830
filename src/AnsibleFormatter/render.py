"""Strict JSON parsing and canonical pretty-printing of extracted fragments."""

from __future__ import annotations

import json
from typing import Any

import orjson

from AnsibleFormatter.errors import FragmentParseError


def _reject_constant(name: str) -> Any:
    raise ValueError(f"{name} is not valid JSON")


def _has_float(value: Any) -> bool:
    stack = [value]
    while stack:
        item = stack.pop()
        if isinstance(item, float):
            return True
        if isinstance(item, dict):
            stack.extend(item.values())
        elif isinstance(item, list):
            stack.extend(item)
    return False


def _loads_exact(fragment: str) -> Any:
    try:
        return json.loads(fragment, parse_constant=_reject_constant)
    except (ValueError, RecursionError) as exc:
        raise FragmentParseError(str(exc) or type(exc).__name__, fragment) from exc


def parse_fragment(fragment: str) -> Any:
    """Strict JSON parse of an extracted fragment.

    orjson does the parse. Integers wider than 64 bits come back from orjson as
    lossy floats, so any float in the result triggers an exact re-parse with
    the stdlib decoder. The stdlib decoder also takes over when orjson refuses
    the input, which covers nesting beyond orjson's depth limit.

    Raises:
        FragmentParseError: If the fragment is not valid JSON.
    """
    try:
        value = orjson.loads(fragment)
    except orjson.JSONDecodeError:
        return _loads_exact(fragment)
    if _has_float(value):
        return _loads_exact(fragment)
    return value


def pretty(value: Any) -> str:
    """Render with two-space indentation, keys in insertion order.

    Raises:
        FragmentParseError: If the value is nested too deeply to render.
    """
    try:
        return orjson.dumps(value, option=orjson.OPT_INDENT_2).decode()
    except orjson.JSONEncodeError:
        # orjson only serializes 64-bit integers and limits nesting depth
        pass
    try:
        return json.dumps(value, indent=2, ensure_ascii=False)
    except RecursionError as exc:
        raise FragmentParseError("value nested too deeply to render") from exc
