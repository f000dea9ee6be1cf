"""
Plugin Host

Discovers, instantiates and initializes plugins inside an adapter or
controller process, with persisted per-plugin enabled flags.
"""

from src.core import (
    PluginBase,
    PluginHandler,
    PluginRegistry,
    PluginScope,
    HostSettings,
    InitResult,
    PluginHostBuilder,
    managed_host,
    plugin,
    setup_logging,
)

__version__ = "0.1.0"

__all__ = [
    "PluginBase",
    "PluginHandler",
    "PluginRegistry",
    "PluginScope",
    "HostSettings",
    "InitResult",
    "PluginHostBuilder",
    "managed_host",
    "plugin",
    "setup_logging",
]
