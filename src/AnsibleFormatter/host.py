"""Editor-facing entry points.

The host (an editor, or the CLI) supplies the document text and applies the
replacement; everything here talks to it through :class:`DocumentHost`. Both
format commands share :func:`run_format` and differ only in what happens after
the edit lands.
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Awaitable, Callable
from typing import Protocol

import structlog

from AnsibleFormatter.config import Settings
from AnsibleFormatter.errors import HostEditError
from AnsibleFormatter.formatter import FormatOptions, format_document_with_stats
from AnsibleFormatter.metrics import inc_counter, observe_histogram, record_stats

log = structlog.get_logger()

NO_EDITOR_MESSAGE = "No active editor found"
EDIT_FAILED_MESSAGE = "Failed to format output"
FORMATTED_MESSAGE = "Ansible output formatted successfully!"
HIGHLIGHTED_MESSAGE = "Ansible output formatted and syntax highlighting applied!"
LANGUAGE_SET_MESSAGE = "Language set to Ansible Output - syntax highlighting applied"


class DocumentHost(Protocol):
    async def get_text(self) -> str | None: ...

    async def apply_edit(self, text: str) -> bool: ...

    async def set_language(self, language_id: str) -> None: ...

    async def fold_all(self) -> None: ...

    async def show_info(self, message: str) -> None: ...

    async def show_error(self, message: str) -> None: ...


PostSuccess = Callable[[DocumentHost, Settings], Awaitable[None]]

# Strong references so fire-and-forget tasks are not collected mid-flight
_background: set[asyncio.Task] = set()


def _spawn(coro: Awaitable[None]) -> asyncio.Task:
    task = asyncio.ensure_future(coro)
    _background.add(task)
    task.add_done_callback(_background.discard)
    return task


async def _fold_later(host: DocumentHost, delay: float) -> None:
    # Give the language switch a moment to take effect first
    await asyncio.sleep(delay)
    try:
        await host.fold_all()
    except Exception:
        log.warning("fold.failed", exc_info=True)


def schedule_fold_all(host: DocumentHost, delay: float) -> asyncio.Task:
    """Request fold-all after ``delay`` seconds without waiting for it."""
    return _spawn(_fold_later(host, delay))


async def run_format(host: DocumentHost, *, settings: Settings, on_success: PostSuccess) -> bool:
    """Format the host's document and hand it back as one full replacement.

    Returns True when the edit was applied. Every failure is reported through
    ``host.show_error`` and leaves the document untouched.
    """
    try:
        text = await host.get_text()
        if text is None:
            await host.show_error(NO_EDITOR_MESSAGE)
            return False

        inc_counter("format.invocations")
        log.info("format.start", chars=len(text))
        started = time.perf_counter()
        options = FormatOptions(keywords_in_strings=settings.keywords_in_strings)
        result = format_document_with_stats(text, options=options)
        if not await host.apply_edit(result.text):
            raise HostEditError(EDIT_FAILED_MESSAGE)
        record_stats(result.stats)
        observe_histogram("format.duration_ms", int((time.perf_counter() - started) * 1000))
        log.info(
            "format.completed",
            chars_in=len(text),
            chars_out=len(result.text),
            **result.stats.as_dict(),
        )
        await on_success(host, settings)
    except HostEditError as exc:
        inc_counter("format.failed")
        log.warning("format.host_edit_failed")
        await host.show_error(str(exc))
        return False
    except Exception as exc:
        inc_counter("format.failed")
        log.error("format.unexpected_error", exc_info=True)
        await host.show_error(f"Error formatting: {exc}")
        return False

    inc_counter("format.success")
    return True


async def _switch_language(host: DocumentHost, settings: Settings, message: str) -> None:
    await host.set_language(settings.language_id)
    log.info("language.set", language_id=settings.language_id)
    await host.show_info(message)
    schedule_fold_all(host, settings.fold_delay_seconds)


async def _switch_language_detached(host: DocumentHost, settings: Settings) -> None:
    try:
        await _switch_language(host, settings, FORMATTED_MESSAGE)
    except Exception:
        log.warning("language.set_failed", exc_info=True)


async def _after_format(host: DocumentHost, settings: Settings) -> None:
    # The edit is already in; the command does not wait for the language switch
    _spawn(_switch_language_detached(host, settings))


async def _after_format_and_highlight(host: DocumentHost, settings: Settings) -> None:
    await _switch_language(host, settings, HIGHLIGHTED_MESSAGE)


async def format_output(host: DocumentHost, *, settings: Settings) -> bool:
    return await run_format(host, settings=settings, on_success=_after_format)


async def format_and_highlight(host: DocumentHost, *, settings: Settings) -> bool:
    """Format, then switch the document to the Ansible output language."""
    return await run_format(host, settings=settings, on_success=_after_format_and_highlight)


async def set_language(host: DocumentHost, *, settings: Settings) -> bool:
    """Switch the content type only; the text is left alone."""
    if await host.get_text() is None:
        await host.show_error(NO_EDITOR_MESSAGE)
        return False
    await host.set_language(settings.language_id)
    log.info("language.set", language_id=settings.language_id)
    await host.show_info(LANGUAGE_SET_MESSAGE)
    return True
