"""
CLI utility helpers: consoles, document loading and output formatting.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, NoReturn

import typer
from rich.console import Console
from rich.table import Table

from sitesearch.core.errors import InvalidConfigError, SiteSearchError, StorageError
from sitesearch.core.nodes import Node
from sitesearch.core.reporter import Reporter

console = Console()
err_console = Console(stderr=True)


def load_nodes(path: Path) -> list[Node]:
    """Read nodes from a JSON array file or a JSON-lines file."""
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise StorageError(f"Cannot read {path}: {exc}", cause=exc).with_context(path=str(path)) from exc

    try:
        if path.suffix in (".jsonl", ".ndjson"):
            records = [json.loads(line) for line in text.splitlines() if line.strip()]
        else:
            records = json.loads(text)
    except json.JSONDecodeError as exc:
        raise InvalidConfigError("documents", str(path), f"{path} is not valid JSON: {exc}") from exc

    if not isinstance(records, list):
        raise InvalidConfigError("documents", str(path), f"{path} must contain a list of nodes")
    return [Node.from_dict(record) for record in records]


def fail(error: SiteSearchError) -> NoReturn:
    """Print ``error`` and exit with status 1."""
    err_console.print(f"[bold red]Error[/bold red] ({error.category.value}): {error.message}")
    raise typer.Exit(code=1)


def summarize(result: Any, namespaced: bool) -> dict[str, int]:
    """Count documents per namespace in a built artifact."""
    if namespaced:
        return {ns: len(bucket["documents"]) for ns, bucket in result.items()}
    return {"(default)": len(result["documents"])}


def output_summary(
    counts: dict[str, int],
    *,
    registered: int,
    snapshot: Path | None,
    reporter: Reporter,
    as_json: bool = False,
) -> None:
    """Render a build summary to the terminal."""
    diagnostics = [{"level": d.level, "message": d.message, "error": d.error} for d in reporter.diagnostics]
    if as_json:
        payload = {
            "registered": registered,
            "namespaces": counts,
            "snapshot": str(snapshot) if snapshot else None,
            "diagnostics": diagnostics,
        }
        console.print_json(json.dumps(payload))
        return

    table = Table(title=f"Search index ({registered} pages registered)")
    table.add_column("Namespace", style="cyan")
    table.add_column("Documents", justify="right")
    for namespace, count in counts.items():
        table.add_row(namespace, str(count))
    console.print(table)

    if snapshot:
        console.print(f"[green]Snapshot written[/green] to {snapshot}")
    for d in diagnostics:
        err_console.print(f"[yellow]{d['level']}[/yellow]: {d['message']}")
