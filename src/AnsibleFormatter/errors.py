"""Error taxonomy for the formatter.

Fragment-level failures (``FragmentParseError``, or a matcher returning None)
never leave the driver: the region is emitted verbatim and scanning goes on.
``FormatError`` and its subclasses are the failures surfaced to the user.
"""

from __future__ import annotations


class FormatError(RuntimeError):
    """A format attempt was aborted; no edit is applied."""

    pass


class HostEditError(FormatError):
    """The host refused to apply the computed replacement."""

    pass


class FragmentParseError(ValueError):
    """An extracted fragment did not parse as JSON."""

    def __init__(self, message: str, fragment: str = "") -> None:
        super().__init__(message)
        self.fragment = fragment
