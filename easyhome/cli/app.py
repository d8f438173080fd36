"""
Main CLI application for EasyHome
Provides commands for importing and searching listings and managing accounts
"""

import asyncio
import logging
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from easyhome.config.models import Settings
from easyhome.config.parser import ConfigParser, ConfigParserError
from easyhome.core.db import Database
from easyhome.core.filtering import apply_filter
from easyhome.core.models import HouseListing, SearchCriteria, SortBy, UserAccount, UserRole
from easyhome.exports.service import ExportError, ExportService

# Initialize Typer apps
app = typer.Typer(
    name="easyhome",
    help="EasyHome - House listing search and account records",
    add_completion=False,
)
user_app = typer.Typer(help="Manage user accounts")
app.add_typer(user_app, name="user")

# Console for rich output
console = Console()


def _settings(ctx: typer.Context) -> Settings:
    return ctx.obj if isinstance(ctx.obj, Settings) else Settings.from_env()


def _listings_table(listings: List[HouseListing], title: str) -> Table:
    """Render listings as a table"""
    table = Table(title=title)
    table.add_column("ID", justify="right", style="cyan")
    table.add_column("Title")
    table.add_column("Price", justify="right")
    table.add_column("Area", justify="right")
    table.add_column("Rooms")
    table.add_column("Deco")
    table.add_column("Facing")
    table.add_column("Year", justify="right")
    table.add_column("Address")

    for listing in listings:
        table.add_row(
            str(listing.id) if listing.id is not None else "-",
            listing.title or "-",
            f"{listing.price:,}" if listing.price is not None else "N/A",
            f"{listing.area:g}" if listing.area is not None else "N/A",
            listing.rooms or "-",
            listing.decoration or "-",
            listing.orientation or "-",
            str(listing.year) if listing.year is not None else "-",
            listing.address or "-",
        )

    return table


@app.command()
def init(ctx: typer.Context):
    """Initialize the database"""
    settings = _settings(ctx)

    async def initialize():
        db = Database(settings.database_url)
        await db.create_tables_async()
        await db.close()

    console.print("[cyan]Initializing EasyHome database...[/cyan]")
    try:
        asyncio.run(initialize())
    except Exception as e:
        console.print(f"[red]Error initializing database: {e}[/red]")
        raise typer.Exit(1)
    console.print("[green]✓ Database initialized successfully![/green]")


@app.command(name="import")
def import_listings(
    ctx: typer.Context,
    file: Path = typer.Argument(..., help="YAML or JSON file of listings"),
):
    """
    Import house listings from a file into the database

    Examples:
        easyhome import listings.yaml
        easyhome import export.json
    """
    settings = _settings(ctx)

    try:
        listings = ConfigParser.load_listings(file)
    except ConfigParserError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)

    async def save_all():
        db = Database(settings.database_url)
        await db.create_tables_async()
        saved = 0
        for listing in listings:
            # Imported listings are always new rows
            if await db.save_house(listing.model_copy(update={"id": None})):
                saved += 1
        await db.close()
        return saved

    try:
        saved = asyncio.run(save_all())
    except Exception as e:
        console.print(f"[red]Error importing listings: {e}[/red]")
        raise typer.Exit(1)

    console.print(f"[green]✓ Imported {saved} of {len(listings)} listings[/green]")
    if saved < len(listings):
        raise typer.Exit(1)


@app.command()
def search(
    ctx: typer.Context,
    title: Optional[str] = typer.Option(None, "--title", help="Title contains (case-insensitive)"),
    address: Optional[str] = typer.Option(None, "--address", help="Address contains (case-insensitive)"),
    min_price: Optional[int] = typer.Option(None, "--min-price", help="Minimum price"),
    max_price: Optional[int] = typer.Option(None, "--max-price", help="Maximum price"),
    min_area: Optional[float] = typer.Option(None, "--min-area", help="Minimum area"),
    max_area: Optional[float] = typer.Option(None, "--max-area", help="Maximum area"),
    rooms: Optional[str] = typer.Option(None, "--rooms", help="Room layout, exact match"),
    decoration: Optional[str] = typer.Option(None, "--decoration", help="Decoration type, exact match"),
    orientation: Optional[str] = typer.Option(None, "--orientation", help="Facing direction, exact match"),
    min_year: Optional[int] = typer.Option(None, "--min-year", help="Earliest build year"),
    max_year: Optional[int] = typer.Option(None, "--max-year", help="Latest build year"),
    sort: Optional[str] = typer.Option(None, "--sort", help="price-asc/price-desc/area-asc/area-desc/year-asc/year-desc"),
    file: Optional[Path] = typer.Option(None, "--file", help="Search a YAML/JSON listing file instead of the database"),
    config: Optional[Path] = typer.Option(None, "--config", help="Saved-query file"),
    query: Optional[str] = typer.Option(None, "--query", help="Saved query name (requires --config)"),
    limit: Optional[int] = typer.Option(None, "--limit", min=1, help="Maximum results to return"),
    output: Optional[Path] = typer.Option(None, "--output", help="Export results to file (CSV/JSON)"),
):
    """
    Search house listings

    Options given on the command line override those of a saved query.
    Empty options are ignored; an empty value in a saved query is kept
    and matches only listings with that field empty.

    Examples:
        easyhome search --min-price 1000000 --max-price 2000000 --sort price-asc
        easyhome search --rooms 3室2厅 --orientation 南北 --file listings.yaml
        easyhome search --config queries.yaml --query new_builds --output new.csv
    """
    settings = _settings(ctx)

    base = {}
    if query:
        if not config:
            console.print("[red]--query requires --config[/red]")
            raise typer.Exit(1)
        try:
            saved = ConfigParser.load_query(config, query)
        except ConfigParserError as e:
            console.print(f"[red]{e}[/red]")
            raise typer.Exit(1)
        base = saved.criteria.model_dump(exclude_none=True)
        if limit is None:
            limit = saved.limit

    overrides = {
        "title": title,
        "address": address,
        "min_price": min_price,
        "max_price": max_price,
        "min_area": min_area,
        "max_area": max_area,
        "rooms": rooms,
        "decoration": decoration,
        "orientation": orientation,
        "min_year": min_year,
        "max_year": max_year,
        "sort_by": sort,
    }
    criteria = SearchCriteria.model_validate(
        {**base, **{k: v for k, v in overrides.items() if v is not None and v != ""}}
    )

    if criteria.sort_by is not None and criteria.sort_key() is None:
        valid = ", ".join(key.value for key in SortBy)
        console.print(f"[yellow]Unknown sort order '{criteria.sort_by}', keeping input order[/yellow]")
        console.print(f"Valid options: {valid}")

    crossed = criteria.crossed_ranges()
    if crossed:
        console.print(f"[yellow]Minimum exceeds maximum for {', '.join(crossed)}[/yellow]")

    if file:
        try:
            results = apply_filter(criteria, ConfigParser.load_listings(file))
        except ConfigParserError as e:
            console.print(f"[red]{e}[/red]")
            raise typer.Exit(1)
        if limit is not None:
            results = results[:limit]
    else:
        async def run_search():
            db = Database(settings.database_url)
            await db.create_tables_async()
            found = await db.search_houses(criteria, limit=limit)
            await db.close()
            return found

        try:
            results = asyncio.run(run_search())
        except Exception as e:
            console.print(f"[red]Error during search: {e}[/red]")
            raise typer.Exit(1)

    if not results:
        console.print("[yellow]No listings found matching criteria[/yellow]")
    else:
        console.print(_listings_table(results, f"\nShowing {len(results)} Listings"))

    if output:
        try:
            exported = ExportService().export_listings(results, output)
        except (ExportError, OSError) as e:
            console.print(f"[red]Export failed: {e}[/red]")
            raise typer.Exit(1)
        console.print(f"[green]Exported {exported} listings to {output}[/green]")


@app.command()
def stats(ctx: typer.Context):
    """Show database statistics"""
    settings = _settings(ctx)

    async def get_stats():
        db = Database(settings.database_url)
        await db.create_tables_async()
        result = await db.get_statistics()
        await db.close()
        return result

    try:
        result = asyncio.run(get_stats())
    except Exception as e:
        console.print(f"[red]Error getting statistics: {e}[/red]")
        raise typer.Exit(1)

    if not result:
        console.print("[red]Statistics unavailable[/red]")
        raise typer.Exit(1)

    console.print("\n[bold cyan]EasyHome Database Statistics[/bold cyan]\n")
    console.print(f"Listings: {result['houses']}")
    console.print(f"Users: {result['users']} ({result['enabled_users']} enabled)")

    price_stats = result["price_stats"]
    if price_stats.get("min_price") is not None:
        console.print("\n[bold]Price Range:[/bold]")
        console.print(f"  Minimum: {price_stats['min_price']:,}")
        console.print(f"  Maximum: {price_stats['max_price']:,}")
        console.print(f"  Average: {int(price_stats['avg_price']):,}")


@user_app.command("add")
def user_add(
    ctx: typer.Context,
    username: str = typer.Argument(..., help="Login name"),
    password: str = typer.Option(..., "--password", prompt=True, hide_input=True, confirmation_prompt=True, help="Account password"),
    role: UserRole = typer.Option(UserRole.USER, "--role", help="Account role"),
    phone: Optional[str] = typer.Option(None, "--phone", help="Contact phone number"),
    email: Optional[str] = typer.Option(None, "--email", help="Contact email address"),
):
    """Create a user account"""
    settings = _settings(ctx)

    try:
        account = UserAccount.create(username, password, role=role, phone=phone, email=email)
    except ValueError as e:
        console.print(f"[red]Invalid account: {e}[/red]")
        raise typer.Exit(1)

    async def save():
        db = Database(settings.database_url)
        await db.create_tables_async()
        saved = await db.save_user(account)
        await db.close()
        return saved

    saved = asyncio.run(save())
    if saved is None:
        console.print(f"[red]Could not create user {username} (does it already exist?)[/red]")
        raise typer.Exit(1)
    console.print(f"[green]✓ Created {saved.role.value} account {saved.username}[/green]")


@user_app.command("show")
def user_show(
    ctx: typer.Context,
    username: str = typer.Argument(..., help="Login name"),
):
    """Show a user account"""
    settings = _settings(ctx)

    async def fetch():
        db = Database(settings.database_url)
        await db.create_tables_async()
        account = await db.get_user(username)
        await db.close()
        return account

    account = asyncio.run(fetch())
    if account is None:
        console.print(f"[red]User not found: {username}[/red]")
        raise typer.Exit(1)

    table = Table(title=f"\nUser {account.username}", show_header=False)
    table.add_column("Field", style="cyan")
    table.add_column("Value")
    table.add_row("Role", account.role.value)
    table.add_row("Enabled", "yes" if account.is_enable else "no")
    table.add_row("Phone", account.phone or "-")
    table.add_row("Email", account.email or "-")
    table.add_row("Created", account.created_at.isoformat() if account.created_at else "-")
    table.add_row("Updated", account.updated_at.isoformat() if account.updated_at else "-")
    console.print(table)


def _set_enabled(ctx: typer.Context, username: str, enabled: bool):
    settings = _settings(ctx)

    async def update():
        db = Database(settings.database_url)
        await db.create_tables_async()
        updated = await db.set_user_enabled(username, enabled)
        await db.close()
        return updated

    if not asyncio.run(update()):
        console.print(f"[red]User not found: {username}[/red]")
        raise typer.Exit(1)
    console.print(f"[green]✓ {'Enabled' if enabled else 'Disabled'} {username}[/green]")


@user_app.command("enable")
def user_enable(
    ctx: typer.Context,
    username: str = typer.Argument(..., help="Login name"),
):
    """Enable a user account"""
    _set_enabled(ctx, username, True)


@user_app.command("disable")
def user_disable(
    ctx: typer.Context,
    username: str = typer.Argument(..., help="Login name"),
):
    """Disable a user account"""
    _set_enabled(ctx, username, False)


@app.command(name="init-config")
def init_config(
    output: Path = typer.Argument(Path("queries.yaml"), help="Where to write the template"),
    force: bool = typer.Option(False, "--force", help="Overwrite an existing file"),
):
    """Write a template saved-query file"""
    if output.exists() and not force:
        console.print(f"[red]{output} already exists (use --force to overwrite)[/red]")
        raise typer.Exit(1)

    try:
        ConfigParser.save_file(ConfigParser.create_template(), output)
    except ConfigParserError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)
    console.print(f"[green]✓ Template written to {output}[/green]")


@app.callback()
def callback(
    ctx: typer.Context,
    database_url: Optional[str] = typer.Option(None, "--database-url", help="Database URL (default from EASYHOME_DATABASE_URL)"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show informational log messages"),
):
    """
    EasyHome - House listing search and account records

    Import listings, search them by price, area, layout and build year,
    and manage user accounts.
    """
    settings = Settings.from_env()
    if database_url:
        settings = settings.model_copy(update={"database_url": database_url})
    ctx.obj = settings

    logging.basicConfig(
        level="INFO" if verbose else settings.log_level,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def main():
    """Main entry point for CLI"""
    # Load environment variables
    from dotenv import load_dotenv
    load_dotenv()

    app()


if __name__ == "__main__":
    main()
