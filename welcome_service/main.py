from __future__ import annotations

import sys
from typing import Optional

import typer
import uvicorn
from rich import box
from rich.console import Console
from rich.table import Table

from welcome_service.api.app import create_app, redact_uri
from welcome_service.config import get_settings
from welcome_service.utils.logging import configure_logging

app = typer.Typer(help="Welcome service CLI.")


@app.command()
def info() -> None:
    """
    Show effective configuration values.
    """
    settings = get_settings()
    table = Table(title="Welcome service configuration", box=box.SIMPLE_HEAVY)
    table.add_column("Setting", style="cyan", no_wrap=True)
    table.add_column("Value", style="white")

    table.add_row("listen", f"{settings.host}:{settings.port}")
    table.add_row("mongo_uri", redact_uri(settings.mongo_uri))
    table.add_row("retry_delay", f"{settings.mongo_retry_delay_seconds}s")
    table.add_row("server_selection_timeout", f"{settings.mongo_server_selection_timeout_ms}ms")
    table.add_row(
        "seed",
        f"{settings.seed_name!r} (idempotent={settings.seed_idempotent})"
        if settings.seed_on_startup
        else "disabled",
    )
    table.add_row("log", f"{settings.log_level} json={settings.log_json}")
    Console().print(table)


@app.command()
def serve(
    host: Optional[str] = typer.Option(
        None, "--host", help="Interface to bind (default from settings)."
    ),
    port: Optional[int] = typer.Option(
        None, "--port", "-p", help="Port to listen on (default from settings)."
    ),
) -> None:
    """
    Start the HTTP server; the database connection is attached in the background.
    """
    settings = get_settings()
    settings = settings.model_copy(
        update={"host": host or settings.host, "port": port or settings.port}
    )
    configure_logging(level=settings.log_level, json_logs=settings.log_json)
    uvicorn.run(
        create_app(settings),
        host=settings.host,
        port=settings.port,
        log_config=None,
    )


def main() -> None:
    try:
        app()
    except KeyboardInterrupt:
        typer.echo("Cancelled by user.", err=True)
        sys.exit(130)


if __name__ == "__main__":
    main()
