"""
Plugin identity settings.

HostSettings describe the process that hosts plugins (adapter or controller),
PluginSettings the identity bundle handed to each plugin constructor.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional
from pydantic import BaseModel, Field


class PluginScope(str, Enum):
    """Hosting context of a plugin."""
    ADAPTER = "adapter"
    CONTROLLER = "controller"


class HostSettings(BaseModel):
    """Identity of the process embedding the plugin handler."""
    scope: PluginScope = PluginScope.ADAPTER
    namespace: str = "system.adapter.host.0"
    log_namespace: str = "host.0"
    host_config: Dict[str, Any] = Field(default_factory=dict)
    parent_package: Dict[str, Any] = Field(default_factory=dict)

    def plugin_namespace(self, name: str) -> str:
        return f"{self.namespace}.plugins.{name}"

    def plugin_log_namespace(self, name: str) -> str:
        return f"{self.log_namespace} Plugin {name}"


@dataclass
class PluginSettings:
    """
    Settings passed to a plugin constructor.

    Attributes:
        scope: ADAPTER or CONTROLLER
        namespace: e.g. "system.adapter.myname.0.plugins.sentry"
        log_namespace: e.g. "myname.0 Plugin sentry"
        log: Backing logger (None means the loguru logger)
        host_config: Configuration of the hosting installation
        parent_package: Package metadata of the adapter/controller using the plugin
    """
    scope: PluginScope
    namespace: str
    log_namespace: str
    log: Optional[Any] = None
    host_config: Dict[str, Any] = field(default_factory=dict)
    parent_package: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def for_plugin(cls, host: HostSettings, name: str, log: Optional[Any] = None) -> "PluginSettings":
        """Derive the settings of plugin `name` from the host identity."""
        return cls(
            scope=host.scope,
            namespace=host.plugin_namespace(name),
            log_namespace=host.plugin_log_namespace(name),
            log=log,
            host_config=host.host_config,
            parent_package=host.parent_package,
        )
