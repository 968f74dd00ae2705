#!/usr/bin/env python3
"""
secretbridge - Main Entry Point

This is the thin orchestration layer that:
1. Loads configuration
2. Builds and starts the controller
3. Blocks readiness until the initial secret list completes
4. Serves the health endpoints until a shutdown signal arrives

All business logic is in the modules, following black box principles.
uvicorn owns signal handling: SIGINT/SIGTERM trigger a graceful shutdown
(exit 0) and a failed startup exits non-zero.
"""

import asyncio
import logging
import sys
from contextlib import asynccontextmanager
from typing import Callable, Optional

import click
import uvicorn
from fastapi import FastAPI

from secretbridge import __version__
from secretbridge.config.provider import ConfigProvider, EnvConfigProvider
from secretbridge.errors import ConfigurationError
from secretbridge.logging_config import configure_logging, get_logging_config
from secretbridge.modules.api import create_health_router
from secretbridge.modules.controller import ControllerFactory, SecretController

logger = logging.getLogger(__name__)

ControllerBuilder = Callable[[ConfigProvider], SecretController]


def create_app(
    config_provider: Optional[ConfigProvider] = None,
    controller_builder: Optional[ControllerBuilder] = None,
) -> FastAPI:
    """
    Create the FastAPI application hosting the controller.

    Args:
        config_provider: Configuration source (default: environment)
        controller_builder: Builds the controller (default: ControllerFactory.build)
    """
    config_provider = config_provider or EnvConfigProvider()
    controller_builder = controller_builder or ControllerFactory.build
    running: dict = {"controller": None}

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """
        Manage controller lifecycle - start, wait for sync, stop.
        """
        logger.info("Starting secretbridge controller...")

        try:
            sync_config = config_provider.get_sync_config()
            controller = controller_builder(config_provider)
        except ConfigurationError as e:
            logger.error(f"Failed to get management cluster config: {e}")
            raise

        controller.start()
        synced = await asyncio.to_thread(controller.wait_for_sync, sync_config.cache_sync_timeout)
        if not synced:
            logger.error(
                f"Initial secret sync did not complete within {sync_config.cache_sync_timeout}s"
            )
            await asyncio.to_thread(controller.stop)
            raise RuntimeError("Failed to sync secret cache")

        running["controller"] = controller
        logger.info("secretbridge started successfully")

        yield

        logger.info("Shutting down secretbridge...")
        running["controller"] = None
        await asyncio.to_thread(controller.stop)
        logger.info("secretbridge shutdown complete")

    def is_ready() -> bool:
        controller = running["controller"]
        return controller is not None and controller.has_synced

    app = FastAPI(
        title="secretbridge",
        description="Propagates Secrets into tenant clusters",
        version=__version__,
        lifespan=lifespan,
    )
    # Under uvicorn requests arrive only after the lifespan yields, so /readyz
    # reports 503 only when this router is mounted on another app
    app.include_router(create_health_router(is_ready))
    return app


@click.command()
@click.option("--host", "host", default=None, help="Health API bind address")
@click.option("--port", "port", type=int, default=None, help="Health API port")
@click.option("--log-level", "log_level", default=None, help="DEBUG, INFO, WARNING or ERROR")
def main(host: Optional[str], port: Optional[int], log_level: Optional[str]):
    """Run the secret synchronization controller."""
    config_provider = EnvConfigProvider()
    try:
        api_config = config_provider.get_api_config()
    except ConfigurationError as e:
        click.echo(f"Invalid configuration: {e}", err=True)
        sys.exit(1)

    level = (log_level or api_config.log_level).upper()
    configure_logging(level)

    uvicorn.run(
        create_app(config_provider),
        host=host or api_config.host,
        port=port or api_config.port,
        log_level=level.lower(),
        log_config=get_logging_config(level),
    )


if __name__ == "__main__":
    main()
