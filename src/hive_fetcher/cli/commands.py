"""CLI commands for Hive Fetcher."""

import asyncio
import sys
from datetime import date, datetime
from typing import Annotated, Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.syntax import Syntax
from rich.table import Table

from ..client.form import SearchForm
from ..client.pipeline import ResultsPipeline
from ..config import settings
from ..errors import ClientPrecheckError, HiveFetcherError
from ..storage.preferences import PLATFORMS, Preferences, PreferencesStore
from ..utils.logging import setup_logging

app = typer.Typer(
    name="hive-fetcher",
    help="Search top-level Hive posts by keyword through a HAF SQL middleware",
    add_completion=False,
)
console = Console()

SNIPPET_LENGTH = 160


def _snippet(text: str, max_length: int = SNIPPET_LENGTH) -> str:
    flat = " ".join(text.split())
    if len(flat) > max_length:
        return flat[:max_length] + "..."
    return flat


@app.command()
def search(
    keywords: Annotated[
        Optional[list[str]],
        typer.Argument(help="Keywords to search for (defaults to the last saved set)"),
    ] = None,
    days: Annotated[
        Optional[int],
        typer.Option("--days", "-d", help="Search the last N days"),
    ] = None,
    from_date: Annotated[
        Optional[datetime],
        typer.Option("--from", formats=["%Y-%m-%d"], help="Custom range start (requires --author)"),
    ] = None,
    to_date: Annotated[
        Optional[datetime],
        typer.Option("--to", formats=["%Y-%m-%d"], help="Custom range end (requires --author)"),
    ] = None,
    author: Annotated[
        Optional[str],
        typer.Option("--author", "-a", help="Only search posts from this account"),
    ] = None,
    filter_term: Annotated[
        Optional[str],
        typer.Option("--filter", "-f", help="Filter results by title, author or body"),
    ] = None,
    page: Annotated[
        int,
        typer.Option("--page", "-p", help="Result page to show"),
    ] = 1,
    platform: Annotated[
        Optional[str],
        typer.Option("--platform", help="Front end for post links: peakd, ecency or hive.blog"),
    ] = None,
    endpoint: Annotated[
        Optional[str],
        typer.Option("--endpoint", "-e", help="Middleware search endpoint"),
    ] = None,
    show_sql: Annotated[
        bool,
        typer.Option("--sql/--no-sql", help="Show the SQL generated on the server"),
    ] = False,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Enable verbose logging"),
    ] = False,
) -> None:
    """Search Hive for posts matching keywords."""
    log_level = "DEBUG" if verbose else settings.log_level
    setup_logging(log_level, stream=sys.stderr)

    if platform is not None and platform not in PLATFORMS:
        console.print(f"[red]Error:[/red] Unknown platform '{platform}'")
        raise typer.Exit(code=1)

    exit_code = asyncio.run(
        _search_async(
            keywords=keywords or [],
            days=days,
            start=from_date.date() if from_date else None,
            end=to_date.date() if to_date else None,
            author=author,
            filter_term=filter_term,
            page=page,
            platform=platform,
            endpoint=endpoint or settings.endpoint_url,
            show_sql=show_sql,
        )
    )
    if exit_code:
        raise typer.Exit(code=exit_code)


async def _search_async(
    keywords: list[str],
    days: int | None,
    start: date | None,
    end: date | None,
    author: str | None,
    filter_term: str | None,
    page: int,
    platform: str | None,
    endpoint: str,
    show_sql: bool,
) -> int:
    """Async implementation of search command."""
    store = PreferencesStore(settings.preferences_path)
    prefs = await store.load()
    if platform:
        prefs.platform = platform

    form = SearchForm(max_keywords=settings.max_keywords, default_days=settings.default_days)
    try:
        for keyword in keywords or prefs.keywords:
            form.add_keyword(keyword)
        if author is not None:
            form.set_scope("user", author)
        if start or end:
            form.set_custom_range(start, end)
        elif days is not None:
            form.set_days(days)
        form.precheck()
    except ClientPrecheckError as e:
        console.print(f"[red]Error:[/red] {e.message}")
        return 1

    console.print("\n[bold red]Hive[/bold red][bold]Fetcher[/bold]")
    console.print(f"Keywords: {', '.join(form.keywords)}")
    console.print(f"Window: {form.describe_window()}")
    if form.scope == "user":
        console.print(f"Author: @{form.author.strip()}")
    console.print()

    async with ResultsPipeline(
        endpoint_url=endpoint,
        page_size=settings.page_size,
        timeout=settings.request_timeout_seconds,
    ) as pipeline:
        try:
            with console.status("[cyan]Searching..."):
                await pipeline.search_form(form)
        except HiveFetcherError as e:
            console.print(Panel(escape(e.message), title="Search Error", border_style="red"))
            _print_debug(pipeline, show_sql=True)
            return 1

        prefs.keywords = list(form.keywords)
        await store.save(prefs)

        view = pipeline.view
        if filter_term:
            view.set_filter(filter_term)
        if page != 1 and not view.go_to_page(page):
            console.print(f"[yellow]Page {page} does not exist, showing page {view.current_page}[/yellow]")

        _print_results(pipeline, prefs, form)
        if show_sql:
            _print_debug(pipeline, show_sql=True)

    return 0


def _print_results(pipeline: ResultsPipeline, prefs: Preferences, form: SearchForm) -> None:
    view = pipeline.view

    if not view.all_posts:
        console.print(f"No posts found matching your keywords in {form.describe_window()}.")
        return

    header_style = "bold magenta" if prefs.theme == "dark" else "bold blue"
    table = Table(
        title=f"Search Results ({len(view.filtered_posts)} of {len(view.all_posts)})",
        show_header=True,
        header_style=header_style,
    )
    table.add_column("Author", style="cyan")
    table.add_column("Title")
    table.add_column("Created", style="green")
    table.add_column("Category")
    table.add_column("Preview", overflow="fold")

    for post in view.visible_posts:
        table.add_row(
            f"@{post.author}",
            f"[link={post.url(prefs.platform_url)}]{escape(post.title)}[/link]",
            post.created.strftime("%b %d %H:%M"),
            f"#{post.category or 'general'}",
            escape(_snippet(post.body)),
        )

    console.print(table)
    console.print(
        f"Page {view.current_page} of {max(1, view.total_pages)}"
        f" - opening in {prefs.platform_url.replace('https://', '')}"
    )


def _print_debug(pipeline: ResultsPipeline, show_sql: bool) -> None:
    if show_sql and pipeline.debug_sql:
        console.print(Panel(
            Syntax(pipeline.debug_sql, "sql", word_wrap=True),
            title="Generated SQL (on server)",
        ))
    console.print(Panel(escape("\n".join(pipeline.debug_log)), title="Execution Log"))


@app.command()
def prefs(
    platform: Annotated[
        Optional[str],
        typer.Option("--platform", help="Front end for post links: peakd, ecency or hive.blog"),
    ] = None,
    theme: Annotated[
        Optional[str],
        typer.Option("--theme", help="Color theme: light or dark"),
    ] = None,
    clear_keywords: Annotated[
        bool,
        typer.Option("--clear-keywords", help="Forget the saved keyword set"),
    ] = False,
) -> None:
    """Show or update saved preferences."""
    asyncio.run(_prefs_async(platform, theme, clear_keywords))


async def _prefs_async(platform: str | None, theme: str | None, clear_keywords: bool) -> None:
    store = PreferencesStore(settings.preferences_path)
    saved = await store.load()

    if platform is not None:
        if platform not in PLATFORMS:
            console.print(f"[red]Error:[/red] Unknown platform '{platform}'")
            raise typer.Exit(code=1)
        saved.platform = platform
    if theme is not None:
        if theme not in ("light", "dark"):
            console.print(f"[red]Error:[/red] Unknown theme '{theme}'")
            raise typer.Exit(code=1)
        saved.theme = theme
    if clear_keywords:
        saved.keywords = []

    if platform is not None or theme is not None or clear_keywords:
        filepath = await store.save(saved)
        console.print(f"[green]Saved:[/green] {filepath}")

    table = Table(title="Preferences", show_header=True)
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="green")
    table.add_row("Keywords", ", ".join(saved.keywords) or "-")
    table.add_row("Platform", f"{saved.platform} ({saved.platform_url})")
    table.add_row("Theme", saved.theme)
    console.print(table)


@app.command()
def serve(
    host: Annotated[
        str,
        typer.Option("--host", "-h", help="API host"),
    ] = settings.api_host,
    port: Annotated[
        int,
        typer.Option("--port", "-p", help="API port"),
    ] = settings.api_port,
    reload: Annotated[
        bool,
        typer.Option("--reload", "-r", help="Enable auto-reload"),
    ] = False,
) -> None:
    """Start the search middleware."""
    import uvicorn

    console.print("\n[bold blue]Starting Hive Fetcher middleware[/bold blue]")
    console.print(f"Host: {host}")
    console.print(f"Port: {port}")
    console.print(f"Search endpoint: http://{host}:{port}/search")
    console.print()

    uvicorn.run(
        "hive_fetcher.api.app:create_app",
        host=host,
        port=port,
        reload=reload,
        factory=True,
    )


@app.command()
def version() -> None:
    """Show version information."""
    from .. import __version__

    console.print(f"Hive Fetcher v{__version__}")


def main() -> None:
    """Main entry point for CLI."""
    app()


if __name__ == "__main__":
    main()
