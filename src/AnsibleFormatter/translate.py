"""Python object-literal to JSON translation.

Ansible prints loop items with ``repr()``, so they arrive as Python literals:
single-quoted strings, ``True``/``False``/``None`` and Python escapes. The
translation is a single pass that tracks which quote style, if any, is open.

The output is best effort and may still fail strict JSON parsing.
"""

from __future__ import annotations

import re

_KEYWORDS: dict[str, str] = {"True": "true", "False": "false", "None": "null"}
_KEYWORD_RE = re.compile(r"\b(True|False|None)\b")
_KEYWORD_AT_RE = re.compile(r"(True|False|None)(?!\w)")

# Simple escapes that map one to one onto JSON escapes
_PASSTHROUGH_ESCAPES: dict[str, str] = {
    "\\": "\\\\",
    '"': '\\"',
    "n": "\\n",
    "t": "\\t",
    "r": "\\r",
}


def _is_word_char(ch: str) -> bool:
    return ch.isalnum() or ch == "_"


def _keyword_at(text: str, i: int) -> str | None:
    """Return the bare keyword starting at ``i`` if it is a whole word."""
    if i > 0 and _is_word_char(text[i - 1]):
        return None
    m = _KEYWORD_AT_RE.match(text, i)
    return m.group(1) if m else None


def _skip_blanks(text: str, i: int) -> int:
    while i < len(text) and text[i] in " \t":
        i += 1
    return i


def python_to_json(fragment: str, *, keywords_in_strings: bool = False) -> str:
    """Rewrite a Python dict/list literal as a JSON literal.

    Args:
        fragment: Text bounded by a matched delimiter pair.
        keywords_in_strings: Substitute ``True``/``False``/``None`` everywhere,
            including inside quoted data (legacy behaviour). By default only
            bare keywords outside quote spans are rewritten.
    """
    text = fragment
    if keywords_in_strings:
        text = _KEYWORD_RE.sub(lambda m: _KEYWORDS[m.group(1)], text)

    out: list[str] = []
    in_single = False
    in_double = False
    n = len(text)
    i = 0
    while i < n:
        ch = text[i]

        if ch == "\\":
            if i + 1 >= n:
                # Trailing lone backslash
                out.append(ch)
                i += 1
                continue
            nxt = text[i + 1]
            if nxt == "\n":
                # Continuation: an escaped newline inside strings, dropped outside
                if in_single or in_double:
                    out.append("\\n")
                i = _skip_blanks(text, i + 2)
                continue
            if nxt == "'":
                # JSON does not escape single quotes
                out.append("'" if in_single else "\\'")
            elif nxt in _PASSTHROUGH_ESCAPES:
                out.append(_PASSTHROUGH_ESCAPES[nxt])
            else:
                out.append(ch + nxt)
            i += 2
            continue

        if ch in "TFN" and not keywords_in_strings and not (in_single or in_double):
            keyword = _keyword_at(text, i)
            if keyword is not None:
                out.append(_KEYWORDS[keyword])
                i += len(keyword)
                continue

        if ch == '"':
            if in_single:
                out.append('\\"')
            else:
                in_double = not in_double
                out.append(ch)
        elif ch == "'":
            if in_double:
                out.append(ch)
            else:
                in_single = not in_single
                out.append('"')
        elif ch == "\n":
            out.append("\\n" if in_single or in_double else ch)
        else:
            out.append(ch)
        i += 1

    return "".join(out)
