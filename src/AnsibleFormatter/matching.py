# matching.py

from __future__ import annotations

CLOSERS: dict[str, str] = {"{": "}", "[": "]"}

_QUOTES = ('"', "'")


def find_matching_json(text: str, start: int, open_char: str, close_char: str) -> int | None:
    """Return the index of the delimiter closing the one at ``start``.

    JSON-aware variant: a string span opens on either quote character and
    closes only on the same character. Backslash makes the next character
    opaque. Returns None when the text ends before depth returns to zero.
    """
    depth = 0
    quote: str | None = None
    escape = False
    for i in range(start, len(text)):
        ch = text[i]
        if escape:
            escape = False
            continue
        if ch == "\\":
            escape = True
            continue

        if quote is None:
            if ch in _QUOTES:
                quote = ch
            elif ch == open_char:
                depth += 1
            elif ch == close_char:
                depth -= 1
                if depth == 0:
                    return i
        elif ch == quote:
            quote = None

    return None


def find_matching_python(text: str, start: int, open_char: str, close_char: str) -> int | None:
    """Python-literal variant of :func:`find_matching_json`.

    Keeps one flag per quote style so a ``'`` inside a double-quoted span (or
    a ``"`` inside a single-quoted one) is data, not a boundary.
    """
    depth = 0
    in_single = False
    in_double = False
    escape = False
    for i in range(start, len(text)):
        ch = text[i]
        if escape:
            escape = False
            continue
        if ch == "\\":
            escape = True
            continue

        if ch == '"' and not in_single:
            in_double = not in_double
            continue
        if ch == "'" and not in_double:
            in_single = not in_single
            continue

        if in_single or in_double:
            continue
        if ch == open_char:
            depth += 1
        elif ch == close_char:
            depth -= 1
            if depth == 0:
                return i

    return None
