"""
Command line host for the formatter.

Examples:
  ansible-playbook site.yml | ansible-formatter format
  ansible-formatter format run.log --in-place
  ansible-formatter check run.log

The CLI plays the editor's role: it supplies the document text and applies
the replacement. Language switching and folding have no meaning on a stream,
so they are logged and otherwise ignored.
"""
from __future__ import annotations

import asyncio
from pathlib import Path

import click
import structlog

from AnsibleFormatter.config import Settings, load_settings
from AnsibleFormatter.formatter import FormatOptions, format_document
from AnsibleFormatter.host import format_and_highlight
from AnsibleFormatter.logging import setup_logging

log = structlog.get_logger()


class StreamHost:
    """DocumentHost over a file path, or stdin/stdout when no path is given."""

    def __init__(self, path: Path | None, *, in_place: bool = False, quiet: bool = False) -> None:
        self.path = path
        self.in_place = in_place
        self.quiet = quiet

    async def get_text(self) -> str | None:
        if self.path is None:
            return click.get_text_stream("stdin").read()
        return self.path.read_text(encoding="utf-8")

    async def apply_edit(self, text: str) -> bool:
        if not self.in_place:
            click.echo(text, nl=False)
            return True
        try:
            self.path.write_text(text, encoding="utf-8")
        except OSError:
            log.warning("cli.write_failed", path=str(self.path), exc_info=True)
            return False
        return True

    async def set_language(self, language_id: str) -> None:
        log.debug("cli.set_language_ignored", language_id=language_id)

    async def fold_all(self) -> None:
        log.debug("cli.fold_all_ignored")

    async def show_info(self, message: str) -> None:
        if not self.quiet:
            click.echo(click.style(message, fg="green"), err=True)

    async def show_error(self, message: str) -> None:
        click.echo(click.style(message, fg="red"), err=True)


def _read_source(path: Path | None) -> str:
    if path is None:
        return click.get_text_stream("stdin").read()
    return path.read_text(encoding="utf-8")


@click.group()
@click.option("--log-level", default=None, help="Console log level (DEBUG, INFO, ..., NONE).")
@click.pass_context
def cli(ctx: click.Context, log_level: str | None) -> None:
    """Reformat JSON and Python literals embedded in Ansible output."""
    settings = load_settings()
    if log_level:
        settings = settings.model_copy(update={"logging_console": log_level.upper()})
    setup_logging(settings)
    ctx.obj = settings


@cli.command("format")
@click.argument("path", required=False, type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--in-place", "-i", is_flag=True, help="Rewrite PATH instead of printing to stdout.")
@click.option(
    "--keywords-in-strings/--no-keywords-in-strings",
    default=None,
    help="Also rewrite True/False/None inside quoted item data.",
)
@click.option("--quiet", "-q", is_flag=True, help="Suppress the success message.")
@click.pass_obj
def format_command(
    settings: Settings,
    path: Path | None,
    in_place: bool,
    keywords_in_strings: bool | None,
    quiet: bool,
) -> None:
    """Format PATH (or stdin)."""
    if in_place and path is None:
        raise click.UsageError("--in-place requires a PATH")
    if keywords_in_strings is not None:
        settings = settings.model_copy(update={"keywords_in_strings": keywords_in_strings})

    host = StreamHost(path, in_place=in_place, quiet=quiet or not in_place)
    ok = asyncio.run(format_and_highlight(host, settings=settings))
    if not ok:
        raise SystemExit(1)


@cli.command("check")
@click.argument("path", required=False, type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.pass_obj
def check_command(settings: Settings, path: Path | None) -> None:
    """Exit with status 1 when formatting would change PATH (or stdin)."""
    try:
        text = _read_source(path)
    except (OSError, UnicodeDecodeError) as exc:
        raise click.ClickException(f"cannot read {path or '<stdin>'}: {exc}") from exc
    options = FormatOptions(keywords_in_strings=settings.keywords_in_strings)
    if format_document(text, options=options) != text:
        click.echo(f"would reformat {path or '<stdin>'}", err=True)
        raise SystemExit(1)
    click.echo(f"{path or '<stdin>'} already formatted", err=True)


def main() -> None:  # pragma: no cover
    cli()


if __name__ == "__main__":  # pragma: no cover
    main()
