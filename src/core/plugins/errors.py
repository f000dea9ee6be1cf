"""Plugin host exceptions."""


class PluginError(Exception):
    """Base exception for plugin-related errors."""
    pass


class PluginResolutionError(PluginError):
    """Raised when no module implementing a plugin can be found or loaded."""
    pass


class PluginRegistrationError(PluginError):
    """Raised when a plugin name is already taken in a registry."""
    pass


class PluginConstructionError(PluginError):
    """Raised when a plugin constructor fails or yields an incompatible object."""
    pass


class PluginStateError(PluginError):
    """Exception raised for invalid plugin lifecycle transitions."""
    pass


class NotInitializedError(PluginError, RuntimeError):
    """Raised when a persistence accessor is used before the databases are bound."""
    pass
