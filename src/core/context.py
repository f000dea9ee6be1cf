"""
Context managers for plugin hosts.

Provides async context managers for cleaner lifecycle handling in tests and scripts.
"""
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from loguru import logger

from .bootstrap import PluginHostBuilder
from .plugins.plugin_handler import PluginHandler


@asynccontextmanager
async def managed_host(builder: Optional[PluginHostBuilder] = None) -> AsyncIterator[PluginHandler]:
    """
    Async context manager for the full plugin host lifecycle.

    Builds the handler (register, bind, initialize) on enter and destroys
    all plugins on exit.

    Example:
        async with managed_host(PluginHostBuilder("config.json")) as handler:
            sentry = handler.get_instance("sentry")

    Args:
        builder: Configured builder (defaults to an empty configuration)

    Yields:
        Initialized PluginHandler
    """
    builder = builder or PluginHostBuilder()
    handler = await builder.build()
    logger.info("managed_host: All plugins initialized")

    try:
        yield handler
    finally:
        await handler.destroy_all()
        await builder.close()
        logger.info("managed_host: All plugins destroyed")
