"""
Plugin Host Core - Plugin lifecycle infrastructure.

Provides the systems for hosting plugins inside an adapter or controller:
- PluginHandler: Registration, database binding, initialization, teardown
- PluginBase: Base class every plugin derives from
- PluginRegistry: Name -> plugin factory lookup
- EnabledStateResolver: Persisted enabled-flag policy with host fallback
- ConfigManager: Configuration with persistence
- PluginHostBuilder / managed_host: One-call startup and shutdown

Usage:
    from src.core import PluginHostBuilder, managed_host

    async with managed_host(PluginHostBuilder("config.json")) as handler:
        print(handler.is_active("sentry"))
"""
from .logging import setup_logging, NamespaceLogger
from .events import Signal
from .plugins import (
    PluginError,
    PluginResolutionError,
    PluginRegistrationError,
    PluginConstructionError,
    PluginStateError,
    NotInitializedError,
    PluginScope,
    HostSettings,
    PluginSettings,
    InitResult,
    ObjectsDB,
    StatesDB,
    PluginProtocol,
    EnabledStateResolver,
    PluginBase,
    PluginState,
    PluginRegistry,
    default_registry,
    PluginHandler,
    PluginSlot,
)
from .database.records import State
from .database.memory import MemoryObjectsDB, MemoryStatesDB
from .config import ConfigManager, AppConfig, LoggingSettings, MongoSettings
from .decorators import plugin
from .bootstrap import PluginHostBuilder
from .context import managed_host

__all__ = [
    # Logging
    "setup_logging",
    "NamespaceLogger",
    "Signal",

    # Errors
    "PluginError",
    "PluginResolutionError",
    "PluginRegistrationError",
    "PluginConstructionError",
    "PluginStateError",
    "NotInitializedError",

    # Plugins
    "PluginScope",
    "HostSettings",
    "PluginSettings",
    "InitResult",
    "ObjectsDB",
    "StatesDB",
    "PluginProtocol",
    "EnabledStateResolver",
    "PluginBase",
    "PluginState",
    "PluginRegistry",
    "default_registry",
    "PluginHandler",
    "PluginSlot",
    "plugin",

    # Persistence
    "State",
    "MemoryObjectsDB",
    "MemoryStatesDB",

    # Configuration
    "ConfigManager",
    "AppConfig",
    "LoggingSettings",
    "MongoSettings",

    # Bootstrap
    "PluginHostBuilder",
    "managed_host",
]
