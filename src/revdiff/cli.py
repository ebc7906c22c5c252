"""Typer application for resolving review file contents."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler

from revdiff import __version__

app = typer.Typer(
    name="revdiff",
    help="Reconstruct review file contents at any checkpoint.",
    add_completion=False,
    no_args_is_help=True,
)

console = Console(stderr=True)

_CONFIG_OPTION = typer.Option(None, "--config", "-c", help="Path to .revdiff.toml")
_FORMAT_OPTION = typer.Option(None, "--format", "-f", help="Output format: terminal | json")
_CHECKPOINT_OPTION = typer.Option(
    None, "--checkpoint", "-k", min=0, help="Checkpoint number (omit for the whole review)"
)


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


def _load(config: Optional[str], format: Optional[str]):
    """Load config and build the service. Exits 2 on config/API errors."""
    from revdiff.api.client import ApiError
    from revdiff.config.loader import ConfigError, load_config
    from revdiff import service

    try:
        cfg = load_config(Path.cwd(), config)
    except ConfigError as exc:
        console.print(f"[bold red]Config error:[/bold red] {exc}")
        raise typer.Exit(code=2) from exc

    if format:
        if format not in ("terminal", "json"):
            console.print(f"[bold red]Invalid format:[/bold red] {format}")
            raise typer.Exit(code=2)
        cfg.output.format = format  # type: ignore[assignment]

    _configure_logging(cfg.logging.level)

    try:
        svc = service.build_service(cfg)
    except ApiError as exc:
        console.print(f"[bold red]API error:[/bold red] {exc}")
        raise typer.Exit(code=2) from exc
    return cfg, svc


def _finish(result: Dict[str, Any]) -> None:
    if not result.get("success"):
        raise typer.Exit(code=1)
    raise typer.Exit(code=0)


# ── contents ──────────────────────────────────────────────────────────────────


@app.command()
def contents(
    review_id: str = typer.Argument(..., help="Review id"),
    repo_id: str = typer.Argument(..., help="Repository id"),
    path: str = typer.Argument(..., help="File path relative to the repository root"),
    checkpoint: Optional[int] = _CHECKPOINT_OPTION,
    side: Optional[str] = typer.Option(None, "--side", help="Print only one side: left | right"),
    config: Optional[str] = _CONFIG_OPTION,
    format: Optional[str] = _FORMAT_OPTION,
) -> None:
    """Show the before/after contents of one file."""
    from revdiff.output import json_report, terminal

    if side not in (None, "left", "right"):
        console.print(f"[bold red]Invalid side:[/bold red] {side}")
        raise typer.Exit(code=2)

    cfg, svc = _load(config, format)
    result = svc.get_contents(review_id, repo_id, checkpoint, path)

    if cfg.output.format == "json":
        print(json_report.render(result))
    else:
        terminal.render_contents(result, path, side=side, console=Console())
    _finish(result)


@app.command()
def show(
    uri: str = typer.Argument(..., help="revdiff://<review>/<checkpoint>/<repo>/<left|right>/<path>"),
    config: Optional[str] = _CONFIG_OPTION,
    format: Optional[str] = _FORMAT_OPTION,
) -> None:
    """Print the side of a file named by a revdiff:// URI."""
    from revdiff.output import json_report, terminal

    cfg, svc = _load(config, format)
    result = svc.get_uri_contents(uri)

    if cfg.output.format == "json":
        print(json_report.render(result))
    elif result.get("success") and "contents" in result:
        Console().print(result["contents"], end="", markup=False, highlight=False, emoji=False, soft_wrap=True)
    else:
        terminal.render_contents(result, uri, console=Console())
    _finish(result)


# ── all-contents ──────────────────────────────────────────────────────────────


@app.command("all-contents")
def all_contents(
    review_id: str = typer.Argument(..., help="Review id"),
    checkpoint: Optional[int] = _CHECKPOINT_OPTION,
    config: Optional[str] = _CONFIG_OPTION,
    format: Optional[str] = _FORMAT_OPTION,
) -> None:
    """Resolve every file of a review (or of one checkpoint)."""
    from revdiff.output import json_report, terminal

    cfg, svc = _load(config, format)
    result = svc.get_all_contents(review_id, checkpoint)

    if cfg.output.format == "json":
        print(json_report.render(result))
    else:
        terminal.render_all_contents(result, console=Console())
    _finish(result)


# ── local ─────────────────────────────────────────────────────────────────────


@app.command()
def local(
    repo_id: str = typer.Argument(..., help="Repository id"),
    path: str = typer.Argument(..., help="File path relative to the repository root"),
    base: str = typer.Option(..., "--base", help="Base commit sha"),
    right: str = typer.Option("saved", "--right", help="Right side: head | staged | saved"),
    editing: Optional[str] = typer.Option(
        None, "--editing", help="Review being amended; its latest contents become the left side"
    ),
    config: Optional[str] = _CONFIG_OPTION,
    format: Optional[str] = _FORMAT_OPTION,
) -> None:
    """Compare a local file against a base commit."""
    from revdiff.output import json_report, terminal

    cfg, svc = _load(config, format)
    result = svc.get_local_contents(repo_id, path, base, right, editing)

    if cfg.output.format == "json":
        print(json_report.render(result))
    else:
        terminal.render_contents(result, path, console=Console())
    _finish(result)


# ── check ─────────────────────────────────────────────────────────────────────


@app.command()
def check(
    review_id: str = typer.Argument(..., help="Review id"),
    config: Optional[str] = _CONFIG_OPTION,
    format: Optional[str] = _FORMAT_OPTION,
) -> None:
    """Verify that every base commit of a review exists locally."""
    from revdiff.output import json_report, terminal

    cfg, svc = _load(config, format)
    result = svc.check_preconditions(review_id)

    if cfg.output.format == "json":
        print(json_report.render(result))
    else:
        terminal.render_preconditions(result, console=console)
    _finish(result)


# ── approvers ─────────────────────────────────────────────────────────────────


@app.command()
def approvers(
    review_id: str = typer.Argument(..., help="Review id"),
    config: Optional[str] = _CONFIG_OPTION,
) -> None:
    """List the user names of a review's approvers."""
    from revdiff.api.client import ApiError
    from revdiff.review.errors import ReviewNotFound

    _, svc = _load(config, None)
    try:
        names = svc.review_approvers(review_id)
    except (ApiError, ReviewNotFound) as exc:
        console.print(f"[bold red]Error:[/bold red] {exc}")
        raise typer.Exit(code=1) from exc
    for name in names:
        print(name)


# ── map ───────────────────────────────────────────────────────────────────────


@app.command("map")
def map_repo(
    repo_id: str = typer.Argument(..., help="Repository id"),
    path: Path = typer.Argument(..., exists=True, file_okay=False, help="Local checkout"),
    config: Optional[str] = _CONFIG_OPTION,
) -> None:
    """Remember the local checkout of a repository."""
    from revdiff.git.adapter import GitError, get_repo_root

    try:
        root = get_repo_root(path)
    except GitError as exc:
        console.print(f"[bold red]Git error:[/bold red] {exc}")
        raise typer.Exit(code=2) from exc

    _, svc = _load(config, None)
    result = svc.remember_repository(repo_id, root)
    if result["success"]:
        console.print(f"[green]✓[/green] {repo_id} → {root}")
    else:
        console.print(f"[red]✗[/red] {result['error']['message']}")
    _finish(result)


# ── init ──────────────────────────────────────────────────────────────────────


@app.command()
def init() -> None:
    """Generate a starter .revdiff.toml in the current directory."""
    from revdiff.config.defaults import DEFAULT_TOML
    from revdiff.config.loader import CONFIG_FILENAME

    config_path = Path.cwd() / CONFIG_FILENAME

    if config_path.exists():
        console.print(f"[yellow]⚠[/yellow]  {CONFIG_FILENAME} already exists at {config_path}")
        raise typer.Exit(code=1)

    config_path.write_text(DEFAULT_TOML, encoding="utf-8")
    console.print(f"[green]✓[/green] Created {config_path}")


# ── version ───────────────────────────────────────────────────────────────────


def _version_callback(value: bool) -> None:
    if value:
        print(f"revdiff {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        False, "--version", "-V", callback=_version_callback,
        is_eager=True, help="Show version and exit",
    ),
) -> None:
    """revdiff — reconstruct review file contents at any checkpoint."""
