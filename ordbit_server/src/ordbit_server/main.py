"""
Main entry point for the ordbit server.
"""

import asyncio
import importlib
import signal
import sys

from catcore.backends.tracker import TrackerBackend
from catcore.builder import TokenTxBuilder
from catcore.registry import TokenRegistry
from catcore.service import TokenService
from loguru import logger

from ordbit_server.config import Settings, get_settings
from ordbit_server.server import OrdbitServer


def setup_logging(level: str) -> None:
    logger.remove()

    logger.add(
        sys.stderr,
        format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>",
        level=level,
        colorize=True,
    )


def load_builder(settings: Settings) -> TokenTxBuilder:
    """
    Instantiate the transaction builder named by ``settings.tx_builder``.

    The value has the form ``package.module:factory``; the factory is called
    with the settings and must return a TokenTxBuilder bound to the wallet.
    """
    target = settings.tx_builder.strip()
    if not target:
        raise ValueError("No transaction builder configured. Set TX_BUILDER=package.module:factory")

    module_name, sep, attr = target.partition(":")
    if not sep or not module_name or not attr:
        raise ValueError(f"Invalid TX_BUILDER value: {target!r} (expected package.module:factory)")

    module = importlib.import_module(module_name)
    factory = getattr(module, attr)
    builder = factory(settings)
    if not isinstance(builder, TokenTxBuilder):
        raise TypeError(f"{target} returned {type(builder).__name__}, not a TokenTxBuilder")
    return builder


def build_service(settings: Settings) -> TokenService:
    backend = TrackerBackend(
        tracker_url=settings.tracker_url,
        mempool_api_url=settings.mempool_api_url,
        network=settings.network,
        timeout=settings.request_timeout,
    )
    return TokenService(
        backend,
        load_builder(settings),
        registry=TokenRegistry(settings.tokens_file),
        network=settings.network,
        merge_backoff=settings.merge_backoff_seconds,
    )


async def run_server(settings: Settings | None = None) -> None:
    settings = settings or get_settings()
    setup_logging(settings.log_level)

    logger.info("Starting ordbit server")
    logger.info(f"Network: {settings.network}")
    logger.info(f"HTTP server: {settings.http_host}:{settings.http_port}")
    logger.info(f"Tracker: {settings.tracker_url}")
    logger.info(f"Mempool API: {settings.mempool_api_url}")

    try:
        service = build_service(settings)
    except (ValueError, TypeError, ImportError, AttributeError) as e:
        logger.error(f"Failed to set up token service: {e}")
        sys.exit(1)

    server = OrdbitServer(settings, service)

    loop = asyncio.get_running_loop()

    def shutdown_handler() -> None:
        logger.info("Received shutdown signal")
        asyncio.create_task(server.stop())

    for sig in (signal.SIGTERM, signal.SIGINT):
        loop.add_signal_handler(sig, shutdown_handler)

    try:
        await server.start()

        while True:
            await asyncio.sleep(1)
    except asyncio.CancelledError:
        logger.info("Server cancelled")
    except Exception as e:
        logger.error(f"Server error: {e}")
        raise
    finally:
        await server.stop()


def main() -> None:
    try:
        asyncio.run(run_server())
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
    except Exception as e:
        logger.exception(f"Fatal error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
