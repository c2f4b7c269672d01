"""
Command-line interface for the ordbit server.
"""

from __future__ import annotations

import asyncio
from typing import Annotated

import typer
from loguru import logger

from ordbit_server import __version__
from ordbit_server.config import Settings
from ordbit_server.main import run_server

app = typer.Typer(
    name="ordbit",
    help="Ordbit - CAT-20 token deploy, mint and transfer server",
    add_completion=False,
)


@app.command()
def serve(
    host: Annotated[str | None, typer.Option("--host", help="HTTP bind address")] = None,
    port: Annotated[int | None, typer.Option("--port", "-p", help="HTTP port")] = None,
    network: Annotated[
        str | None, typer.Option("--network", help="mainnet, testnet, signet or regtest")
    ] = None,
    log_level: Annotated[str | None, typer.Option("--log-level", "-l", help="Log level")] = None,
) -> None:
    """Run the HTTP API."""
    overrides = {
        key: value
        for key, value in {
            "http_host": host,
            "http_port": port,
            "network": network,
            "log_level": log_level.upper() if log_level else None,
        }.items()
        if value is not None
    }
    settings = Settings(**overrides)

    try:
        asyncio.run(run_server(settings))
    except KeyboardInterrupt:
        logger.info("Interrupted by user")


@app.command()
def version() -> None:
    """Print the version."""
    typer.echo(f"ordbit {__version__}")


def main() -> None:
    app()


if __name__ == "__main__":
    main()
