from __future__ import annotations

import logging
import pathlib
import sys
from enum import Enum
from typing import NoReturn, Optional

import click
import typer
import structlog
from rich.console import Console
from rich.markup import escape

from .config import load_config, RedactedConfig
from .engine.redactor import Redactor
from .errors import RedactedError
from .host.buffer import TextBuffer
from .obscure.strategies import CharSubstitution, ObscuringStrategy, PatternSubstitution, strategy_from_config

console = Console()
log = structlog.get_logger()
app = typer.Typer(add_completion=False, no_args_is_help=True, help="redacted — obscure regions of text buffers")


class Partition(str, Enum):
    line = "line"
    paragraph = "paragraph"


def version_callback(value: bool):
    if value:
        from . import __version__
        console.print(f"redacted {__version__}")
        raise typer.Exit()


def _fail(err: RedactedError) -> NoReturn:
    console.print(f"[red]error:[/red] {escape(str(err))}", highlight=False)
    raise typer.Exit(code=1)


def _print_text(text: str) -> None:
    console.print(text, markup=False, highlight=False, soft_wrap=True)


@app.callback()
def common(
    ctx: typer.Context,
    config: Optional[pathlib.Path] = typer.Option(None, "--config", help="Path to a redacted YAML config"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose logs"),
    version: Optional[bool] = typer.Option(None, "--version", callback=version_callback, is_eager=True),
):
    """Global options (config, verbosity)."""
    structlog.configure(
        processors=[structlog.processors.add_log_level, structlog.processors.JSONRenderer()],
        wrapper_class=structlog.make_filtering_bound_logger(logging.DEBUG if verbose else logging.WARNING),
        logger_factory=structlog.PrintLoggerFactory(sys.stderr),
    )
    try:
        ctx.obj = {"config": load_config(config)}
    except RedactedError as e:
        _fail(e)
    if verbose:
        log.info("verbose_enabled")


def _strategy(
    cfg: RedactedConfig, char: Optional[str], pattern: Optional[str], replacement: Optional[str]
) -> Optional[ObscuringStrategy]:
    if replacement is not None and pattern is None:
        raise typer.BadParameter("--replacement only applies together with --pattern", param_hint="--replacement")
    if pattern is not None:
        repl = replacement if replacement is not None else cfg.obscuring.replacement
        return PatternSubstitution.from_pattern(pattern, repl)
    if char is not None:
        return CharSubstitution(char)
    return strategy_from_config(cfg.obscuring)


def _load(src: pathlib.Path, partition: Optional[Partition], start: Optional[int], end: Optional[int]) -> Redactor:
    cfg: RedactedConfig = click.get_current_context().obj["config"]
    try:
        text = src.read_text(encoding="utf-8")
    except UnicodeDecodeError as e:
        raise RedactedError(f"not valid UTF-8 text in {src} ({e.reason} at byte {e.start})") from e
    buf = TextBuffer(text)
    redactor = Redactor.from_config(buf, cfg)
    if partition is not None:
        redactor.set_partition(partition.value)
    lo = 0 if start is None else start
    hi = buf.size if end is None else min(end, buf.size)
    redactor.scheduler.partitioner(lo, hi)
    return redactor


@app.command()
def obscure(
    text: str = typer.Argument(..., help="Text to obscure"),
    char: Optional[str] = typer.Option(None, "--char", help="Replace every character with this one"),
    pattern: Optional[str] = typer.Option(None, "--pattern", help="Preset name or regex; each match is replaced"),
    replacement: Optional[str] = typer.Option(None, "--replacement", help="Replacement for --pattern matches"),
):
    """Print TEXT the way a hidden span would show it."""
    cfg: RedactedConfig = click.get_current_context().obj["config"]
    try:
        strategy = _strategy(cfg, char, pattern, replacement)
    except RedactedError as e:
        _fail(e)
    _print_text(strategy(text) if strategy is not None else text)


@app.command()
def preview(
    src: pathlib.Path = typer.Argument(..., exists=True, dir_okay=False, help="Text file to preview"),
    partition: Optional[Partition] = typer.Option(None, "--partition", case_sensitive=False, help="Line or paragraph spans"),
    start: Optional[int] = typer.Option(None, "--start", min=0, help="First offset to redact"),
    end: Optional[int] = typer.Option(None, "--end", min=0, help="Offset to stop redacting at"),
):
    """Print SRC with its redacted regions obscured."""
    try:
        redactor = _load(src, partition, start, end)
        _print_text(redactor.render())
    except RedactedError as e:
        _fail(e)


@app.command()
def report(
    src: pathlib.Path = typer.Argument(..., exists=True, dir_okay=False, help="Text file to preview"),
    out: pathlib.Path = typer.Option(..., "--out", help="Write the HTML preview here"),
    partition: Optional[Partition] = typer.Option(None, "--partition", case_sensitive=False, help="Line or paragraph spans"),
):
    """Write an HTML preview of SRC with its spans."""
    from .reporting.html import write_report
    try:
        redactor = _load(src, partition, None, None)
    except RedactedError as e:
        _fail(e)
    write_report(redactor, out, source=str(src))
    console.print(f"[green]Report written:[/green] {out}")
