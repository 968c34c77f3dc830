"""Scan-and-replace driver.

Walks normalized Ansible output once and reformats every embedded structure
it can parse, in priority order at each position:

1. ``(item={...})``: Python literal of a loop item.
2. ``=> {...}`` / ``=> [...]``: JSON result after a task arrow.
3. A bare ``{...}`` / ``[...]`` that starts its line, or follows ``=>`` or
   ``:`` on it.

Regions that fail to match or parse are copied verbatim. The driver is a pure
function of its input; it performs no I/O and keeps no state between calls.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from pydantic import BaseModel, ConfigDict

from AnsibleFormatter.cleanup import clean_json_escapes
from AnsibleFormatter.errors import FormatError, FragmentParseError
from AnsibleFormatter.matching import CLOSERS, find_matching_json, find_matching_python
from AnsibleFormatter.normalize import normalize_newlines
from AnsibleFormatter.render import parse_fragment, pretty
from AnsibleFormatter.translate import python_to_json

ITEM_TOKEN = "(item="
ARROW = "=>"
TRIGGERS = ("item", "arrow", "bare")

_WHITESPACE = " \t\n\r"


class FormatOptions(BaseModel):
    """Knobs for a single format call."""

    model_config = ConfigDict(frozen=True)

    # Rewrite True/False/None inside quoted item data too (legacy behaviour)
    keywords_in_strings: bool = False


@dataclass
class FormatStats:
    formatted: dict[str, int] = field(default_factory=lambda: dict.fromkeys(TRIGGERS, 0))
    fallback: dict[str, int] = field(default_factory=lambda: dict.fromkeys(TRIGGERS, 0))

    @property
    def total_formatted(self) -> int:
        return sum(self.formatted.values())

    def as_dict(self) -> dict[str, int]:
        out = {f"{k}_formatted": v for k, v in self.formatted.items()}
        out.update({f"{k}_fallback": v for k, v in self.fallback.items()})
        return out


@dataclass(frozen=True)
class FormatResult:
    text: str
    stats: FormatStats


def _skip_whitespace(text: str, i: int) -> int:
    while i < len(text) and text[i] in _WHITESPACE:
        i += 1
    return i


def _render_first(fragment: str, strategies: tuple[Callable[[str], str], ...]) -> str | None:
    """Pretty-print ``fragment`` after the first rewrite that parses, or None."""
    for rewrite in strategies:
        try:
            return pretty(parse_fragment(rewrite(fragment)))
        except FragmentParseError:
            continue
    return None


def _unchanged(fragment: str) -> str:
    return fragment


class _Scanner:
    def __init__(self, text: str, options: FormatOptions) -> None:
        self.text = text
        self.options = options
        self.pos = 0
        self.out: list[str] = []
        self.stats = FormatStats()

    def run(self) -> str:
        text = self.text
        while self.pos < len(text):
            ch = text[self.pos]
            if ch == "(" and text.startswith(ITEM_TOKEN, self.pos) and self._marked_item():
                continue
            if ch == "=" and text.startswith(ARROW, self.pos):
                self._arrow()
                continue
            if ch in CLOSERS and self._bare_region():
                continue
            self.out.append(ch)
            self.pos += 1
        return "".join(self.out)

    def _translate(self, fragment: str) -> str:
        return python_to_json(fragment, keywords_in_strings=self.options.keywords_in_strings)

    def _marked_item(self) -> bool:
        text = self.text
        start = _skip_whitespace(text, self.pos + len(ITEM_TOKEN))
        if start >= len(text) or text[start] != "{":
            return False

        end = find_matching_python(text, start, "{", "}")
        close_paren = _skip_whitespace(text, end + 1) if end is not None else len(text)
        if end is None or close_paren >= len(text) or text[close_paren] != ")":
            self.stats.fallback["item"] += 1
            return False

        rendered = _render_first(text[start : end + 1], (self._translate, _unchanged))
        if rendered is None:
            self.stats.fallback["item"] += 1
            self.out.append("(")
            self.pos += 1
            return True

        self.out.append(ITEM_TOKEN + "\n" + rendered + "\n)")
        self.pos = close_paren + 1
        self.stats.formatted["item"] += 1
        return True

    def _arrow(self) -> None:
        text = self.text
        self.out.append(ARROW)
        after = self.pos + len(ARROW)
        start = _skip_whitespace(text, after)

        if start < len(text) and text[start] in CLOSERS:
            opener = text[start]
            end = find_matching_json(text, start, opener, CLOSERS[opener])
            if end is not None:
                rendered = _render_first(text[start : end + 1], (_unchanged, clean_json_escapes))
                if rendered is not None:
                    self.out.append("\n" + rendered)
                    self.pos = end + 1
                    self.stats.formatted["arrow"] += 1
                    return
            self.stats.fallback["arrow"] += 1

        # Keep the skipped whitespace and resume at the delimiter itself
        self.out.append(text[after:start])
        self.pos = start

    def _bare_region(self) -> bool:
        text = self.text
        start = self.pos
        line_start = text.rfind("\n", 0, start) + 1
        before = text[line_start:start].strip()
        # Braces after arbitrary text on the same line are data, not a literal
        if before and not before.endswith((ARROW, ":")):
            return False

        opener = text[start]
        end = find_matching_json(text, start, opener, CLOSERS[opener])
        if end is None:
            return False
        rendered = _render_first(text[start : end + 1], (_unchanged, clean_json_escapes))
        if rendered is None:
            self.stats.fallback["bare"] += 1
            return False

        if before:
            self.out.append("\n")
        self.out.append(rendered)
        self.pos = end + 1
        self.stats.formatted["bare"] += 1
        return True


def format_document_with_stats(text: str, *, options: FormatOptions | None = None) -> FormatResult:
    """Format a whole document and report what was reformatted."""
    if not isinstance(text, str):
        raise FormatError(f"Expected document text as str, got {type(text).__name__}")
    scanner = _Scanner(normalize_newlines(text), options or FormatOptions())
    return FormatResult(text=scanner.run(), stats=scanner.stats)


def format_document(text: str, *, options: FormatOptions | None = None) -> str:
    """Return ``text`` with every parseable embedded structure pretty-printed."""
    return format_document_with_stats(text, options=options).text
