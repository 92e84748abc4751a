"""Main CLI application for finditfast."""

import asyncio
import uuid
from typing import Optional

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from finditfast.core.config import settings, ensure_data_dirs
from finditfast.core.geodesic import format_distance
from finditfast.core.models import Coordinates, MalformedCoordinate, SearchResult, StoreStatus
from finditfast.core.search_engine import SearchEngine, SearchUnavailable
from finditfast.db.adapters import SqlItemIndex, SqlKeyValueStore, SqlStoreDirectory
from finditfast.db.models import ItemListing, StoreRequest, utcnow
from finditfast.db.repository import (
    ItemRepository,
    KeyValueRepository,
    StoreRequestRepository,
    get_db,
)

# Create Typer app
app = typer.Typer(
    name="finditfast",
    help="Find which approved store nearby carries an item, and where it sits",
    add_completion=False,
)

# Sub-apps
store_app = typer.Typer(help="Store request management commands")
item_app = typer.Typer(help="Item listing commands")
app.add_typer(store_app, name="store")
app.add_typer(item_app, name="item")

console = Console()

# Template for .env file
ENV_TEMPLATE = """# finditfast configuration
# Result cache lifetime and size
#CACHE_TTL_SECONDS=300
#CACHE_MAX_ENTRIES=50

# Number of past queries kept in the search history
#HISTORY_MAX_ITEMS=10

# Warm the cache with popular queries when the web server starts
#PRELOAD_ON_STARTUP=false

#WEB_HOST=127.0.0.1
#WEB_PORT=8730
#LOG_LEVEL=INFO
"""


def _build_engine() -> SearchEngine:
    return SearchEngine(
        item_index=SqlItemIndex(ItemRepository()),
        store_directory=SqlStoreDirectory(StoreRequestRepository()),
        kv_store=SqlKeyValueStore(KeyValueRepository()),
    )


def _parse_location(lat: Optional[float], lon: Optional[float]) -> Optional[Coordinates]:
    if lat is None and lon is None:
        return None
    if lat is None or lon is None:
        raise typer.BadParameter("--lat and --lon must be given together")
    try:
        return Coordinates(latitude=lat, longitude=lon)
    except MalformedCoordinate as e:
        raise typer.BadParameter(str(e))


@app.command()
def init(
    force: bool = typer.Option(False, "--force", "-f", help="Overwrite existing .env file"),
):
    """Initialize finditfast configuration.

    Creates the data directory, the database and a template .env file.
    The configuration is stored in ~/.finditfast/
    """
    config_dir = settings.data_dir
    env_file = config_dir / ".env"

    # Create directory
    config_dir.mkdir(parents=True, exist_ok=True)
    console.print(f"[green]Created directory:[/green] {config_dir}")

    get_db()
    console.print(f"[green]Database ready:[/green] {settings.db_path}")

    # Create .env file
    if env_file.exists() and not force:
        console.print(f"[yellow]Config file already exists:[/yellow] {env_file}")
        console.print("[dim]Use --force to overwrite[/dim]")
    else:
        env_file.write_text(ENV_TEMPLATE)
        console.print(f"[green]Created config file:[/green] {env_file}")

    console.print("\n[dim]Then run: finditfast store add <name> to request your first store[/dim]")


def _display_result(result: SearchResult, index: int):
    """Display a search result in a panel."""
    item = result.item
    store = result.store

    badges = []
    if item.verified:
        badges.append("[green]verified[/green]")
    if item.report_count:
        badges.append(f"[red]{item.report_count} report(s)[/red]")

    lines = [f"{store.name} - {store.address}"]
    if result.distance_km is not None:
        lines.append(f"Distance: {format_distance(result.distance_km)}")
    if item.price is not None:
        lines.append(f"Price: {item.price:.2f}")
    if item.position is not None:
        lines.append(f"Shelf position: ({item.position.x:g}, {item.position.y:g})")
    if badges:
        lines.append(" ".join(badges))

    title = f"[bold]{index}. {item.name}[/bold]"
    console.print(Panel("\n".join(lines), title=title, border_style="blue"))


@app.command()
def search(
    query: str = typer.Argument(..., help="Item to look for"),
    lat: Optional[float] = typer.Option(None, "--lat", help="Your latitude"),
    lon: Optional[float] = typer.Option(None, "--lon", help="Your longitude"),
    verified_only: bool = typer.Option(False, "--verified-only", "-v", help="Only verified items"),
    max_distance: Optional[float] = typer.Option(None, "--max-distance", "-d", help="Radius in km"),
    limit: int = typer.Option(10, "--limit", "-n", help="Number of results to show"),
):
    """Search approved stores for an item.

    Examples:
        finditfast search milk
        finditfast search "oat milk" --lat 40.7128 --lon -74.0060 -d 5
    """
    ensure_data_dirs()
    location = _parse_location(lat, lon)
    engine = _build_engine()

    try:
        results = asyncio.run(
            engine.search_with_filters(
                query,
                user_location=location,
                verified_only=verified_only,
                max_distance_km=max_distance,
            )
        )
    except SearchUnavailable as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)

    if not results:
        console.print(f"[yellow]No items found for '{query}'[/yellow]")
        return

    console.print(f"[bold]Found {len(results)} result(s) for '{query}'[/bold]\n")
    for i, result in enumerate(results[:limit], 1):
        _display_result(result, i)


@app.command()
def history(
    limit: int = typer.Option(settings.recent_searches_count, "--limit", "-n", help="Number of queries"),
):
    """Show recent searches, newest first."""
    ensure_data_dirs()
    queries = asyncio.run(_build_engine().get_recent_queries(limit))

    if not queries:
        console.print("[yellow]No recent searches[/yellow]")
        return

    for query in queries:
        console.print(f"  {query}")


@app.command(name="clear-history")
def clear_history():
    """Forget all recent searches."""
    ensure_data_dirs()
    asyncio.run(_build_engine().clear_history())
    console.print("[green]Search history cleared[/green]")


@app.command()
def suggest(
    partial: str = typer.Argument(..., help="Start of a query"),
    limit: int = typer.Option(5, "--limit", "-n"),
):
    """Suggest queries from history and popular searches."""
    ensure_data_dirs()
    suggestions = asyncio.run(_build_engine().get_search_suggestions(partial, limit=limit))
    if not suggestions:
        console.print("[yellow]No suggestions[/yellow]")
        return
    for suggestion in suggestions:
        console.print(f"  {suggestion}")


@app.command()
def status():
    """Show database status."""
    ensure_data_dirs()

    item_repo = ItemRepository()
    store_repo = StoreRequestRepository()

    table = Table(title="finditfast Status")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", style="green")

    table.add_row("Items in database", str(item_repo.count()))
    for store_status in StoreStatus:
        table.add_row(f"Stores {store_status.value}", str(store_repo.count(store_status)))
    table.add_row("Database location", str(settings.db_path))

    console.print(table)


@store_app.command("list")
def store_list(
    status_filter: Optional[StoreStatus] = typer.Option(None, "--status", "-s", help="Filter by status"),
):
    """List store requests."""
    ensure_data_dirs()
    requests = StoreRequestRepository().list_by_status(status_filter)

    if not requests:
        console.print("[yellow]No store requests found[/yellow]")
        return

    table = Table(title=f"Store requests ({len(requests)})")
    table.add_column("ID", style="cyan", no_wrap=True)
    table.add_column("Name", style="white")
    table.add_column("Address", style="dim")
    table.add_column("Status", style="magenta")

    for request in requests:
        table.add_row(request.id, request.store_name, request.address or "-", request.status)

    console.print(table)


@store_app.command("add")
def store_add(
    name: str = typer.Argument(..., help="Store name"),
    address: str = typer.Option("", "--address", "-a"),
    lat: Optional[float] = typer.Option(None, "--lat"),
    lon: Optional[float] = typer.Option(None, "--lon"),
    requested_by: str = typer.Option("cli", "--by"),
):
    """Request a new store listing (starts as pending)."""
    ensure_data_dirs()
    location = _parse_location(lat, lon)
    request = StoreRequest(
        id=uuid.uuid4().hex,
        store_name=name,
        address=address,
        latitude=location.latitude if location else None,
        longitude=location.longitude if location else None,
        requested_by=requested_by,
    )
    StoreRequestRepository().add(request)
    console.print(f"[green]Requested store:[/green] {name} ({request.id})")


def _review_store(store_id: str, status: StoreStatus, reviewed_by: Optional[str]):
    ensure_data_dirs()
    updated = StoreRequestRepository().set_status(store_id, status, reviewed_by=reviewed_by)
    if not updated:
        console.print(f"[red]Store request not found: {store_id}[/red]")
        raise typer.Exit(1)
    console.print(f"[green]{updated.store_name} is now {status.value}[/green]")


@store_app.command("approve")
def store_approve(
    store_id: str = typer.Argument(..., help="Store request ID"),
    reviewed_by: Optional[str] = typer.Option(None, "--by"),
):
    """Approve a store so its items appear in search."""
    _review_store(store_id, StoreStatus.APPROVED, reviewed_by)


@store_app.command("reject")
def store_reject(
    store_id: str = typer.Argument(..., help="Store request ID"),
    reviewed_by: Optional[str] = typer.Option(None, "--by"),
):
    """Reject a store request."""
    _review_store(store_id, StoreStatus.REJECTED, reviewed_by)


@item_app.command("add")
def item_add(
    name: str = typer.Argument(..., help="Item name"),
    store_id: str = typer.Option(..., "--store", "-s", help="Store ID (virtual_ prefix allowed)"),
    price: Optional[float] = typer.Option(None, "--price"),
    x: Optional[float] = typer.Option(None, "--x", help="Shelf position x"),
    y: Optional[float] = typer.Option(None, "--y", help="Shelf position y"),
    category: Optional[str] = typer.Option(None, "--category", "-c"),
    verified: bool = typer.Option(False, "--verified"),
):
    """Place an item in a store."""
    ensure_data_dirs()
    listing = ItemListing(
        id=uuid.uuid4().hex,
        name=name,
        store_id=store_id,
        price=price,
        position_x=x,
        position_y=y,
        category=category,
        verified=verified,
        verified_at=utcnow() if verified else None,
    )
    ItemRepository().add(listing)
    console.print(f"[green]Added item:[/green] {name} ({listing.id})")


@app.command()
def web(
    host: str = typer.Option(settings.web_host, "--host", "-h", help="Host to bind to"),
    port: int = typer.Option(settings.web_port, "--port", "-p", help="Port to bind to"),
    reload: bool = typer.Option(False, "--reload", "-r", help="Enable auto-reload for development"),
):
    """Start the search API server.

    Examples:
        finditfast web                    # Start on default port 8730
        finditfast web --port 8080        # Start on port 8080
        finditfast web --reload           # Start with auto-reload for development
    """
    ensure_data_dirs()

    import uvicorn

    console.print("[bold green]Starting finditfast API[/bold green]")
    console.print(f"[blue]Server: http://{host}:{port}[/blue]")
    console.print("[dim]Press Ctrl+C to stop[/dim]\n")

    uvicorn.run(
        "finditfast.web.main:app",
        host=host,
        port=port,
        reload=reload,
    )


if __name__ == "__main__":
    app()
