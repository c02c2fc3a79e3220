"""
Command-Line Interface

CLI commands for Akasha operations.

Commands:
    akasha learn         - Learn from text (argument or --file)
    akasha ask           - Ask a question
    akasha info          - Display record counts for the configured scope
    akasha health        - Check store and provider availability
    akasha check-config  - Validate the configuration

Usage:
    # Persist to DuckDB between invocations
    export AKASHA_STORAGE_BACKEND=duckdb AKASHA_SCOPE_ID=demo AKASHA_SCOPE_NAME=Demo

    akasha learn "Alice works for Acme Corp."
    akasha learn --file notes.txt --context-name "Meeting notes"
    akasha ask "Who works for Acme Corp?" --strategy entities --stats
    akasha info

Environment variables (and a ``.env`` file in the working directory) are
read through AkashaConfig; ``--config`` adds a TOML file underneath them.
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Optional

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.logging import RichHandler
from rich.markdown import Markdown
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from akasha.types.options import QueryStrategy

__all__ = ["main", "app"]

app = typer.Typer(
    name="akasha",
    help="Scoped GraphRAG: learn text into a knowledge graph and ask it questions",
    no_args_is_help=True,
)
console = Console()

_state: dict[str, Optional[Path]] = {"config": None}


@app.callback()
def _main(
    verbose: bool = typer.Option(
        False,
        "--verbose", "-v",
        help="Show library log output",
    ),
    config: Optional[Path] = typer.Option(
        None,
        "--config", "-c",
        help="TOML configuration file",
        exists=True,
        dir_okay=False,
    ),
    env_file: Optional[Path] = typer.Option(
        None,
        "--env-file",
        help="Environment file to load (default: ./.env)",
    ),
) -> None:
    """Global options."""
    load_dotenv(env_file or Path.cwd() / ".env")
    if verbose:
        logging.basicConfig(
            level=logging.INFO,
            format="%(message)s",
            handlers=[RichHandler(console=console, rich_tracebacks=True)],
        )
    _state["config"] = config


def _load_config():
    from akasha.config import AkashaConfig

    path = _state["config"]
    return AkashaConfig.from_file(path) if path else AkashaConfig()


def _create_akasha():
    from akasha.api.akasha import Akasha

    return Akasha(_load_config())


@app.command()
def learn(
    text: Optional[str] = typer.Argument(
        None,
        help="Text to learn (omit when using --file)",
    ),
    file: Optional[Path] = typer.Option(
        None,
        "--file", "-f",
        help="Read the text from a file",
        exists=True,
        dir_okay=False,
    ),
    context_id: Optional[str] = typer.Option(
        None,
        "--context-id",
        help="Context to record the facts under",
    ),
    context_name: Optional[str] = typer.Option(
        None,
        "--context-name", "-n",
        help="Human-readable context name",
    ),
    valid_from: Optional[str] = typer.Option(
        None,
        "--valid-from",
        help="ISO-8601 time the facts become valid",
    ),
    valid_to: Optional[str] = typer.Option(
        None,
        "--valid-to",
        help="ISO-8601 time the facts stop being valid",
    ),
) -> None:
    """Extract entities and relationships from text and store them."""
    if file is not None:
        text = file.read_text(encoding="utf-8")
    if not text:
        console.print("[red]Provide TEXT or --file[/]")
        raise typer.Exit(code=1)

    async def _run() -> None:
        from akasha.errors import AkashaError
        from akasha.types.options import LearnOptions

        akasha = _create_akasha()
        try:
            with Progress(
                SpinnerColumn(),
                TextColumn("[progress.description]{task.description}"),
                console=console,
            ) as progress:
                task = progress.add_task("Learning...")
                result = await akasha.learn(
                    text,
                    LearnOptions(
                        context_id=context_id,
                        context_name=context_name,
                        valid_from=valid_from,
                        valid_to=valid_to,
                    ),
                )
                progress.update(task, completed=True)
        except AkashaError as e:
            console.print(f"[red]{e}[/]")
            raise typer.Exit(code=1)
        finally:
            await akasha.close()

        console.print()
        console.print(Panel(
            f"[green]Learned into context {result.context.name}[/]\n\n"
            f"  Document ID: {result.document.id} "
            f"({'created' if result.created.document else 'reused'})\n"
            f"  Entities: {len(result.entities)} ({result.created.entities} new)\n"
            f"  Relationships: {result.created.relationships}",
            title="Learn Complete",
        ))
        console.print(result.summary, markup=False)

    asyncio.run(_run())


@app.command()
def ask(
    question: str = typer.Argument(
        ...,
        help="Question to ask the knowledge graph",
    ),
    strategy: QueryStrategy = typer.Option(
        QueryStrategy.BOTH,
        "--strategy", "-s",
        help="Seed search strategy",
    ),
    limit: Optional[int] = typer.Option(
        None,
        "--limit", "-l",
        min=1,
        help="Maximum entities in the retrieved subgraph",
    ),
    depth: Optional[int] = typer.Option(
        None,
        "--depth", "-d",
        min=1,
        max=10,
        help="Traversal depth from the seed entities",
    ),
    threshold: Optional[float] = typer.Option(
        None,
        "--threshold", "-t",
        min=0.0,
        max=1.0,
        help="Minimum similarity of seed documents/entities",
    ),
    stats: bool = typer.Option(
        False,
        "--stats",
        help="Show timing statistics",
    ),
) -> None:
    """Ask a question."""

    async def _run() -> None:
        akasha = _create_akasha()
        config = akasha.config
        try:
            with Progress(
                SpinnerColumn(),
                TextColumn("[progress.description]{task.description}"),
                console=console,
            ) as progress:
                task = progress.add_task("Thinking...")
                result = await akasha.ask(
                    question,
                    strategy=strategy,
                    limit=limit or config.query_limit,
                    max_depth=depth or config.query_max_depth,
                    similarity_threshold=(
                        threshold if threshold is not None else config.query_similarity_threshold
                    ),
                    include_stats=stats,
                )
                progress.update(task, completed=True)
        finally:
            await akasha.close()

        console.print()
        console.print(Panel(
            Markdown(result.answer),
            title="Answer",
            border_style="green" if result.found_anything else "yellow",
        ))

        if result.context.entities:
            table = Table(title="Entities")
            table.add_column("Label", style="cyan")
            table.add_column("Name")
            table.add_column("Similarity", justify="right", style="dim")
            for entity in result.context.entities[:20]:
                similarity = f"{entity.similarity:.2f}" if entity.similarity is not None else ""
                table.add_row(entity.label, entity.display_name, similarity)
            console.print(table)

        if result.statistics:
            s = result.statistics
            console.print(
                f"\n[dim]search {s.search_time_ms}ms, subgraph {s.subgraph_retrieval_time_ms}ms, "
                f"llm {s.llm_generation_time_ms}ms, total {s.total_time_ms}ms "
                f"({s.documents_found} documents, {s.entities_found} entities, "
                f"{s.relationships_found} relationships)[/]"
            )

    asyncio.run(_run())


@app.command()
def info() -> None:
    """Display record counts for the configured scope."""

    async def _run() -> None:
        akasha = _create_akasha()
        try:
            stats = await akasha.stats()
        finally:
            await akasha.close()

        table = Table(title=f"Scope: {akasha.scope_id or '(all scopes)'}")
        table.add_column("Metric", style="cyan")
        table.add_column("Count", justify="right", style="green")
        table.add_row("Documents", str(stats["documents"]))
        table.add_row("Entities", str(stats["entities"]))
        table.add_row("Relationships", str(stats["relationships"]))
        console.print(table)

    asyncio.run(_run())


@app.command()
def health() -> None:
    """Check store and provider availability."""

    async def _run() -> None:
        akasha = _create_akasha()
        try:
            status = await akasha.health_check()
        finally:
            await akasha.close()

        color = {"healthy": "green", "degraded": "yellow", "unhealthy": "red"}[status.status]
        store = "connected" if status.store.connected else f"down ({status.store.error})"
        providers = (
            "available" if status.providers.available else f"down ({status.providers.error})"
        )
        console.print(Panel(
            f"  Store: {store}\n  Providers: {providers}",
            title=f"[{color}]{status.status}[/]",
        ))
        if status.status != "healthy":
            raise typer.Exit(code=1)

    asyncio.run(_run())


@app.command("check-config")
def check_config() -> None:
    """Validate the configuration without contacting any service."""
    config = _load_config()
    result = config.validate()

    console.print(repr(config), markup=False)
    for issue in result.errors:
        console.print(f"[red]error[/] {issue.field}: {issue.message}")
    for issue in result.warnings:
        console.print(f"[yellow]warning[/] {issue.field}: {issue.message}")
    if result.valid:
        console.print("[green]Configuration is valid[/]")
    else:
        raise typer.Exit(code=1)


def main() -> None:
    """Entry point for the CLI."""
    app()
