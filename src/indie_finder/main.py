import asyncio
import json

from typer import Typer, Argument, Option
from typing import Annotated
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from .config import configure_logging
from .models import SearchResponse
from .service import build_orchestrator

app = Typer(help="Search the indie game corpus from the terminal.")


async def run_search(
    query: str,
    *,
    user_id: str | None = None,
    db_path: str | None = None,
) -> SearchResponse:
    orchestrator = build_orchestrator(db_path=db_path)
    return await orchestrator.search_with_metadata(query, user_id)


def render_response(console: Console, response: SearchResponse, limit: int) -> None:
    meta = response.metadata
    summary = (
        f"intent: [bold]{meta.intent.type}[/] ({meta.intent.confidence:.2f})\n"
        f"strategy: [bold]{meta.strategy}[/]\n"
        f"results: {meta.result_count}  time: {meta.processing_time_ms}ms"
    )
    if response.reference_game is not None:
        summary += f"\nreference game: {response.reference_game.name}"
    console.print(
        Panel(summary, title=f"Search: {meta.query}", title_align="left", border_style="bold cyan")
    )

    if not response.results:
        console.print("[bold red]No games found[/]")
        return

    table = Table(show_lines=False)
    table.add_column("#", justify="right")
    table.add_column("Title", style="bold")
    table.add_column("Tags")
    table.add_column("Price")
    table.add_column("Score", justify="right")
    for rank, result in enumerate(response.results[:limit], start=1):
        score = result.relevance if result.relevance is not None else result.similarity
        table.add_row(
            str(rank),
            result.game.title,
            ", ".join(result.game.tags),
            result.game.price,
            f"{score:.3f}",
        )
    console.print(table)


@app.command()
def search(
    query: Annotated[str, Argument(help="Free-text search query.")],
    user_id: Annotated[
        str | None, Option("--user-id", "-u", help="Scope the response cache to a user.")
    ] = None,
    db_path: Annotated[
        str | None, Option("--db-path", help="DuckDB corpus path (overrides INDIE_FINDER_DB_PATH).")
    ] = None,
    as_json: Annotated[bool, Option("--json", help="Print the raw response envelope.")] = False,
    limit: Annotated[int, Option("--limit", "-n", help="Rows to display.")] = 10,
) -> None:
    """Run one search and print the ranked games."""
    configure_logging()
    if as_json:
        response = asyncio.run(run_search(query, user_id=user_id, db_path=db_path))
        print(json.dumps(response.to_public_dict(), indent=2))
        return

    console = Console()
    with console.status(status="Searching..."):
        response = asyncio.run(run_search(query, user_id=user_id, db_path=db_path))
    render_response(console, response, limit)


@app.command()
def serve(
    host: Annotated[str, Option("--host", help="Bind address.")] = "127.0.0.1",
    port: Annotated[int, Option("--port", help="Bind port.")] = 8000,
) -> None:
    """Serve the search API over HTTP."""
    from .server import run_server

    configure_logging()
    run_server(host=host, port=port)
