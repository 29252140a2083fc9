"""Command-line entry point."""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console

from . import __version__
from .cancellation import CancellationToken
from .config import Settings, load_env
from .controller import SessionController
from .engine import PlaybackEngine
from .errors import CommitNotFoundError, CommitSourceError, ConfigError, TerminalError
from .logging import configure_logging, get_logger
from .source import GitCommitSource
from .speed import SpeedRule
from .ui import run_session

console = Console(stderr=True)
app = typer.Typer(help="Replay git commits as a live typing animation", add_completion=False)
logger = get_logger("gitlogue.cli")


class Order(str, Enum):
    random = "random"
    asc = "asc"
    desc = "desc"


class DiffMode(str, Enum):
    unstaged = "unstaged"
    staged = "staged"
    all = "all"


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"gitlogue {__version__}")
        raise typer.Exit()


def build_settings(
    config: Optional[Path],
    path: Optional[Path],
    commit: Optional[str],
    speed: Optional[float],
    order: Optional[Order],
    loop: Optional[bool],
    diff: Optional[DiffMode],
    speed_rules: Optional[List[str]],
    log_level: Optional[str],
    log_file: Optional[Path],
) -> Settings:
    """Environment (or config file) first, then command-line overrides."""
    settings = Settings.from_file(config) if config else Settings.from_env()

    if path is not None:
        settings.source.repo_path = path
    if commit is not None:
        settings.source.commit = commit
        settings.source.range_mode = ".." in commit
    if order is not None:
        settings.source.order = order.value
    if loop is not None:
        settings.source.loop = loop
    if diff is not None:
        settings.source.diff_mode = diff.value
    if speed is not None:
        settings.playback.speed_ms = speed
    if speed_rules:
        settings.playback.speed_rules = [SpeedRule.parse(rule) for rule in speed_rules]
    if log_level is not None:
        settings.logging.level = log_level.upper()
    if log_file is not None:
        settings.logging.log_file = log_file

    settings.validate()
    return settings


@app.command()
def main(
    path: Optional[Path] = typer.Option(None, "--path", "-p", help="Repository to replay"),
    commit: Optional[str] = typer.Option(None, "--commit", "-c", help="Commit to show, or a range A..B"),
    speed: Optional[float] = typer.Option(None, "--speed", "-s", help="Milliseconds per character"),
    order: Optional[Order] = typer.Option(None, "--order", help="Commit traversal order"),
    loop: Optional[bool] = typer.Option(None, "--loop/--no-loop", help="Start over when commits run out"),
    diff: Optional[DiffMode] = typer.Option(None, "--diff", help="Replay uncommitted changes"),
    speed_rules: Optional[List[str]] = typer.Option(
        None, "--speed-rule", help="Pacing rule KINDS[>=MIN][<=MAX]:(Nms|xF); repeatable, first match wins"
    ),
    config: Optional[Path] = typer.Option(None, "--config", help="YAML or TOML settings file"),
    log_level: Optional[str] = typer.Option(None, "--log-level", help="DEBUG, INFO, WARNING, ERROR"),
    log_file: Optional[Path] = typer.Option(None, "--log-file", help="Write logs here instead of stderr"),
    version: bool = typer.Option(
        False, "--version", callback=_version_callback, is_eager=True, help="Show version and exit"
    ),
) -> None:
    """Replay commits of a git repository in the terminal."""
    load_env()
    try:
        settings = build_settings(
            config, path, commit, speed, order, loop, diff, speed_rules, log_level, log_file
        )
    except (ConfigError, ValueError, FileNotFoundError) as e:
        console.print(f"[red]Invalid configuration:[/red] {e}")
        raise typer.Exit(code=2)

    configure_logging(
        level=settings.logging.level,
        json_output=settings.logging.format == "json",
        log_file=settings.logging.log_file,
    )

    source = GitCommitSource(settings.source.repo_path)
    try:
        source.verify()
    except CommitSourceError as e:
        console.print(f"[red]Not a git repository:[/red] {settings.source.repo_path}")
        logger.log_error(e)
        raise typer.Exit(code=1)

    engine = PlaybackEngine(
        settings.playback.rule_set(),
        line_pause_ms=settings.playback.line_pause_ms,
        max_checkpoints=settings.playback.max_checkpoints,
    )
    controller = SessionController(
        engine,
        source,
        settings.source,
        token=CancellationToken(),
        max_history=settings.playback.max_history,
    )

    with logger.session_context(repo_path=str(settings.source.repo_path)):
        logger.debug("Settings loaded", **settings.to_dict())
        try:
            controller.start()
        except CommitNotFoundError as e:
            console.print(f"[red]{e.message}[/red]")
            logger.log_error(e)
            raise typer.Exit(code=1)

        if not controller.history.entries:
            console.print("[yellow]No commits to show.[/yellow]")
            return

        try:
            run_session(controller, poll_interval_ms=settings.ui.poll_interval_ms)
        except TerminalError as e:
            console.print(f"[red]Terminal error:[/red] {e.message}")
            logger.log_error(e)
            raise typer.Exit(code=1)


__all__ = ["app", "build_settings"]
