"""Libris CLI application using Typer."""

import asyncio
from pathlib import Path
from typing import Annotated
from uuid import UUID

import sqlalchemy
import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from libris import __version__
from libris.config import settings
from libris.core.importer.results import ImportResult, summarize_results
from libris.core.importer.service import BookImportService
from libris.db.session import AsyncSessionLocal, engine, init_db
from libris.utils.exceptions import ImportDirectoryError
from libris.utils.logging import configure_logging

app = typer.Typer(
    name="libris",
    help="Libris - ONIX book metadata import pipeline",
    add_completion=False,
)
console = Console()


def version_callback(value: bool) -> None:
    """Display version and exit."""
    if value:
        console.print(f"[bold cyan]Libris[/bold cyan] version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            "-v",
            help="Show version and exit",
            callback=version_callback,
            is_eager=True,
        ),
    ] = None,
) -> None:
    """Libris - ONIX book metadata import pipeline."""
    configure_logging(log_level=settings.log_level, environment=settings.environment)


async def validate_database_connectivity() -> None:
    """
    Validate database connectivity.

    Raises:
        typer.Exit: If database connection fails
    """
    try:
        async with engine.begin() as conn:
            await conn.execute(sqlalchemy.text("SELECT 1"))
    except Exception as e:
        console.print("\n[bold red]❌ Database Connection Failed:[/bold red]")
        console.print(f"  {e}")
        console.print(
            "\n[yellow]Hint:[/yellow] Verify DATABASE_URL and ensure the database is running"
        )
        raise typer.Exit(code=1) from None


def print_result(result: ImportResult) -> None:
    """Print one file's import outcome."""
    status = "[green]✓ Success[/green]" if result.success else "[red]✗ Failed[/red]"
    console.print(f"\n[bold]{result.filename}[/bold] {status}")
    console.print(f"  Import Log ID: [dim]{result.import_log_id}[/dim]")
    console.print(
        f"  Books: {result.total_books} total, {result.imported_books} imported, "
        f"{result.skipped_books} skipped"
    )
    if result.error_count:
        console.print(f"  [yellow]Errors: {result.error_count}[/yellow]")
        for error in result.errors:
            console.print(f"    • {error}")


@app.command()
def run() -> None:
    """
    Import every ONIX file waiting in the incoming directory.

    Files are processed one at a time and moved to the processed or failed
    directory when done.

    Examples:
        libris run
    """
    settings.ensure_import_directories()

    console.print(
        Panel.fit(
            "[bold cyan]Libris[/bold cyan] - ONIX Import\n"
            f"Version {__version__}",
            border_style="cyan",
        )
    )
    console.print("\n[bold]Configuration:[/bold]")
    console.print(f"  Database: {settings.database_url.split('@')[-1]}")
    console.print(f"  Incoming: {settings.incoming_dir}")
    console.print(f"  Existing books: {settings.existing_book_policy}")

    async def run_batch() -> list[ImportResult]:
        await validate_database_connectivity()
        async with AsyncSessionLocal() as session:
            service = BookImportService(session=session)
            return await service.process_incoming_files()

    try:
        results = asyncio.run(run_batch())

    except ImportDirectoryError as e:
        console.print(f"\n[bold red]❌ Import Failed:[/bold red] {e}")
        raise typer.Exit(code=1) from None

    except KeyboardInterrupt:
        console.print("\n\n[yellow]Cancelled by user (Ctrl+C)[/yellow]")
        raise typer.Exit(code=130) from None

    if not results:
        console.print("\n[yellow]No XML files found in the incoming directory[/yellow]\n")
        return

    for result in results:
        print_result(result)

    summary = summarize_results(results)
    table = Table(title="Import Summary", show_header=False)
    table.add_column("Metric", style="cyan")
    table.add_column("Value", justify="right")
    table.add_row("Files processed", str(summary.total_files))
    table.add_row("Successful", str(summary.successful_files))
    table.add_row("Failed", str(summary.failed_files))
    table.add_row("Books imported", str(summary.total_books_imported))
    table.add_row("Books skipped", str(summary.total_books_skipped))
    table.add_row("Errors", str(summary.total_errors))
    console.print("\n", table, "\n")

    if summary.failed_files:
        raise typer.Exit(code=1)


@app.command(name="file")
def import_file(
    path: Annotated[
        Path,
        typer.Argument(help="ONIX XML file to import", exists=True, dir_okay=False),
    ],
) -> None:
    """
    Import a single ONIX file.

    The file is moved to the processed or failed directory afterwards.

    Examples:
        libris file imports/incoming/example_APONIX.xml
    """

    async def run_file() -> ImportResult:
        await validate_database_connectivity()
        async with AsyncSessionLocal() as session:
            service = BookImportService(session=session)
            return await service.import_file(path)

    try:
        result = asyncio.run(run_file())
    except KeyboardInterrupt:
        console.print("\n\n[yellow]Cancelled by user (Ctrl+C)[/yellow]")
        raise typer.Exit(code=130) from None

    print_result(result)
    console.print()
    if not result.success:
        raise typer.Exit(code=1)


@app.command()
def logs(
    limit: Annotated[
        int,
        typer.Option("--limit", "-n", help="Maximum number of logs to show"),
    ] = 50,
) -> None:
    """
    List import logs, oldest first.

    Examples:
        libris logs
        libris logs --limit 10
    """

    async def run_logs() -> None:
        async with AsyncSessionLocal() as session:
            service = BookImportService(session=session)
            import_logs = await service.list_import_logs(limit=limit)

        if not import_logs:
            console.print("\n[yellow]No imports recorded yet[/yellow]\n")
            console.print("[dim]Run 'libris run' to import waiting files[/dim]\n")
            return

        table = Table(title=f"Import Logs ({len(import_logs)} shown)")
        table.add_column("Log ID", style="dim", no_wrap=True)
        table.add_column("File", style="cyan", max_width=40)
        table.add_column("Source", style="white")
        table.add_column("Status")
        table.add_column("Total", justify="right")
        table.add_column("Imported", justify="right")
        table.add_column("Skipped", justify="right")
        table.add_column("Errors", justify="right")
        table.add_column("Started", style="dim")

        for log in import_logs:
            status_style = "green" if log.status == "completed" else "red"
            started = log.started_at.strftime("%Y-%m-%d %H:%M") if log.started_at else "N/A"
            table.add_row(
                str(log.id),
                log.filename,
                log.import_source or "N/A",
                f"[{status_style}]{log.status}[/{status_style}]",
                str(log.total_books),
                str(log.imported_books),
                str(log.skipped_books),
                str(log.error_count),
                started,
            )

        console.print("\n", table, "\n")

    asyncio.run(run_logs())


@app.command()
def show(
    import_log_id: Annotated[UUID, typer.Argument(help="Import log ID")],
) -> None:
    """
    Show one import log with its recorded errors.

    Examples:
        libris show 123e4567-e89b-12d3-a456-426614174000
    """

    async def run_show() -> None:
        async with AsyncSessionLocal() as session:
            service = BookImportService(session=session)
            found = await service.get_import_log(import_log_id)

        if found is None:
            console.print(f"\n[bold red]❌ Import log not found:[/bold red] {import_log_id}\n")
            raise typer.Exit(code=1)

        log, errors = found
        console.print(
            Panel.fit(
                f"[bold cyan]{log.filename}[/bold cyan]\n\n"
                f"Status: {log.status}\n"
                f"Source: {log.import_source or 'N/A'}\n"
                f"Books: {log.total_books} total, {log.imported_books} imported, "
                f"{log.skipped_books} skipped, {log.error_count} errors\n"
                f"Started: {log.started_at}\n"
                f"Completed: {log.completed_at}",
                border_style="cyan",
            )
        )

        if not errors:
            return

        table = Table(title=f"Errors ({len(errors)})")
        table.add_column("Type", style="red")
        table.add_column("Book", style="cyan")
        table.add_column("Message", style="white", max_width=60)
        for error in errors:
            table.add_row(error.error_type, error.book_identifier or "-", error.error_message)
        console.print("\n", table, "\n")

    asyncio.run(run_show())


@app.command(name="init-db")
def init_database() -> None:
    """
    Create database tables and import directories.

    Intended for local development; production schemas are managed separately.
    """
    settings.ensure_import_directories()
    asyncio.run(init_db())
    console.print("[green]✓ Database tables created[/green]")
    console.print(f"[green]✓ Import directories ready under {settings.imports_dir}[/green]")


if __name__ == "__main__":
    app()
