"""Newline and escape normalization for raw Ansible output."""

from __future__ import annotations

import re

# Continuation: backslash + newline, plus the indentation of the wrapped line
_CONTINUATION_RE = re.compile(r"\\\n\s*")
_DOUBLE_ESCAPED_NEWLINE_RE = re.compile(r"\\\\\n")


def normalize_newlines(text: str) -> str:
    """Collapse soft line breaks and expand literal ``\\n`` sequences.

    - ``\\`` + newline + following whitespace -> newline
    - literal two-character ``\\n`` -> newline
    - doubled backslash + newline -> newline

    Continuations are folded first so that they are never read as an escaped n.
    """
    if not text:
        return ""
    result = _CONTINUATION_RE.sub("\n", text)
    result = result.replace("\\n", "\n")
    result = _DOUBLE_ESCAPED_NEWLINE_RE.sub("\n", result)
    return result
