"""
Plugin System.

Plugin registration, enabled-state resolution and lifecycle management.
"""
from .errors import (
    PluginError,
    PluginResolutionError,
    PluginRegistrationError,
    PluginConstructionError,
    PluginStateError,
    NotInitializedError,
)
from .settings import PluginScope, HostSettings, PluginSettings
from .protocol import InitResult, ObjectsDB, StatesDB, PluginProtocol
from .resolver import EnabledStateResolver, derive_host_namespace, is_valid_flag
from .plugin_base import PluginBase, PluginState
from .registry import PluginRegistry, default_registry
from .plugin_handler import PluginHandler, PluginSlot

__all__ = [
    'PluginError', 'PluginResolutionError', 'PluginRegistrationError',
    'PluginConstructionError', 'PluginStateError', 'NotInitializedError',
    'PluginScope', 'HostSettings', 'PluginSettings',
    'InitResult', 'ObjectsDB', 'StatesDB', 'PluginProtocol',
    'EnabledStateResolver', 'derive_host_namespace', 'is_valid_flag',
    'PluginBase', 'PluginState',
    'PluginRegistry', 'default_registry',
    'PluginHandler', 'PluginSlot',
]
