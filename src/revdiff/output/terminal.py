"""Rich terminal reporter."""

from __future__ import annotations

import difflib
from typing import Any, Dict, Optional

from rich.console import Console
from rich.syntax import Syntax
from rich.table import Table


def _print_error(console: Console, result: Dict[str, Any]) -> None:
    error = result.get("error") or {}
    console.print(
        f"[bold red]✗ {error.get('type', 'ERROR')}:[/bold red] {error.get('message', '')}"
    )


def _unified(left: str, right: str, left_name: str, right_name: str) -> str:
    return "".join(
        difflib.unified_diff(
            left.splitlines(keepends=True),
            right.splitlines(keepends=True),
            fromfile=left_name,
            tofile=right_name,
        )
    )


def render_contents(
    result: Dict[str, Any],
    path: str,
    *,
    side: Optional[str] = None,
    console: Optional[Console] = None,
) -> None:
    """Print one file's left/right pair as a diff, or a single side verbatim."""
    console = console or Console()
    if not result.get("success"):
        _print_error(console, result)
        return
    if result.get("fileNotIncludedInReview"):
        console.print(f"[yellow]⚠[/yellow]  {path} is not part of this review.")
        return
    if side is not None:
        console.print(result[side], end="", markup=False, highlight=False, emoji=False, soft_wrap=True)
        return

    patch = _unified(result["left"], result["right"], f"a/{path}", f"b/{path}")
    if not patch:
        console.print(f"[dim]{path}: left and right are identical.[/dim]")
        return
    console.print(Syntax(patch, "diff", theme="ansi_dark", word_wrap=True))


def render_all_contents(result: Dict[str, Any], *, console: Optional[Console] = None) -> None:
    """Print a per-repository table of resolved files."""
    console = console or Console()
    if not result.get("success"):
        _print_error(console, result)
        return

    for repo in result["repos"]:
        table = Table(
            title=f"Repository {repo['repo_id']}",
            title_style="bold",
            border_style="dim",
        )
        table.add_column("File", style="magenta")
        table.add_column("Renamed from", style="dim")
        table.add_column("+", justify="right", style="green")
        table.add_column("-", justify="right", style="red")
        table.add_column("Status")

        for f in repo["files"]:
            renamed = f["left_path"] if f["left_path"] != f["right_path"] else ""
            if f.get("error"):
                table.add_row(f["path"], renamed, "-", "-", f"[red]{f['error']}[/red]")
                continue
            added = removed = 0
            for line in difflib.ndiff(f["left"].splitlines(), f["right"].splitlines()):
                if line.startswith("+ "):
                    added += 1
                elif line.startswith("- "):
                    removed += 1
            table.add_row(f["path"], renamed, str(added), str(removed), "[green]ok[/green]")

        console.print(table)


def render_preconditions(result: Dict[str, Any], *, console: Optional[Console] = None) -> None:
    console = console or Console()
    if result.get("success"):
        console.print("[green]✓[/green] All base commits for this review are available locally.")
    else:
        _print_error(console, result)
