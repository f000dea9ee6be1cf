"""
Decorator Utilities for the plugin host.

Provides syntactic sugar for common patterns.
"""
from typing import Type, TypeVar, Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from .plugins.registry import PluginRegistry

T = TypeVar('T')


def plugin(name: Optional[str] = None, registry: Optional['PluginRegistry'] = None):
    """
    Decorator to register a class as a plugin.

    Args:
        name: Plugin name (defaults to lower-cased class name)
        registry: Target registry (defaults to the global one)

    Usage:
        @plugin("sentry")
        class SentryPlugin(PluginBase):
            pass
    """
    def decorator(cls: Type[T]) -> Type[T]:
        from .plugins.registry import default_registry

        target = registry if registry is not None else default_registry
        plugin_name = name or cls.__name__.lower()
        target.register(plugin_name, cls)
        cls._plugin_name = plugin_name
        return cls
    return decorator
