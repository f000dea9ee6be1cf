"""
Enabled-State Resolver.

Decides whether a plugin should be activated when it is initialized.
Sources, in priority order:

1. the plugin's own persisted flag at "<namespace>.enabled"
2. adapter scope only: the flag of the same plugin on the host
   ("system.host.<host>.plugins.<name>.enabled")
3. the static "enabled" entry of the plugin configuration (default True)

Once the plugin's own flag exists it wins over everything else, so a user
toggle survives restarts and configuration changes.
"""
import re
from typing import Any, Dict, Mapping, Optional, TYPE_CHECKING

from .errors import NotInitializedError
from .settings import PluginScope
from ..database.records import State

if TYPE_CHECKING:
    from .plugin_base import PluginBase


def folder_definition() -> Dict[str, Any]:
    """Object definition of the plugin's state folder."""
    return {
        "type": "folder",
        "common": {
            "name": "Plugin States",
        },
        "native": {},
    }


def enabled_definition() -> Dict[str, Any]:
    """Object definition of the "enabled" state."""
    return {
        "type": "state",
        "common": {
            "name": "Plugin - enabled",
            "type": "boolean",
            "read": True,
            "write": True,
            "role": "value",
        },
        "native": {},
    }


def is_valid_flag(state: Optional[State]) -> bool:
    """True if `state` holds a usable enabled flag (not missing, not an object)."""
    if state is None:
        return False
    return state.val is not None and not isinstance(state.val, (Mapping, list, tuple))


def config_default(config: Mapping[str, Any]) -> bool:
    """Static default from the plugin configuration."""
    enabled = config.get("enabled")
    return True if enabled is None else bool(enabled)


def derive_host_namespace(namespace: str, parent_config: Optional[Mapping[str, Any]]) -> Optional[str]:
    """
    Map an adapter plugin namespace onto the host-level namespace.

    "system.adapter.<name>.<instance>.plugins.x" -> "system.host.<host>.plugins.x"

    Returns None when the parent configuration has no host/name or the
    namespace does not belong to that adapter.
    """
    common = (parent_config or {}).get("common") or {}
    host = common.get("host")
    adapter_name = common.get("name")
    if not host or not adapter_name:
        return None

    pattern = re.compile(rf"^system\.adapter\.{re.escape(str(adapter_name))}\.\d+\.")
    if not pattern.match(namespace):
        return None
    return pattern.sub(lambda _: f"system.host.{host}.", namespace, count=1)


class EnabledStateResolver:
    """
    Resolves the effective enabled flag for one plugin instance.

    Uses the plugin's own persistence accessors, so the databases must be
    bound before resolve() is called.
    """

    def __init__(self, plugin: 'PluginBase'):
        self.plugin = plugin

    @property
    def enabled_id(self) -> str:
        return f"{self.plugin.namespace}.enabled"

    async def ensure_definitions(self) -> None:
        """Create the folder and the "enabled" state definition if missing."""
        try:
            await self.plugin.extend_object(self.plugin.namespace, folder_definition())
            await self.plugin.extend_object(self.enabled_id, enabled_definition())
        except NotInitializedError:
            raise
        except Exception as e:
            self.plugin.log.warn(f"Could not create plugin objects: {e}")

    async def _read_flag(self, state_id: str) -> Optional[bool]:
        try:
            state = await self.plugin.get_state(state_id)
        except NotInitializedError:
            raise
        except Exception as e:
            self.plugin.log.debug(f"Could not read {state_id}, treating as absent: {e}")
            return None
        if not is_valid_flag(state):
            return None
        return bool(state.val)

    async def resolve(self, config: Mapping[str, Any],
                      parent_config: Optional[Mapping[str, Any]] = None) -> bool:
        """
        Decide whether the plugin should be activated.

        Args:
            config: Plugin configuration
            parent_config: Package configuration of the adapter/controller

        Returns:
            True if the plugin should be initialized
        """
        await self.ensure_definitions()

        own = await self._read_flag(self.enabled_id)
        if own is not None:
            self.plugin.log.silly(f"Using persisted enabled flag: {own}")
            return own

        if self.plugin.scope == PluginScope.ADAPTER:
            host_namespace = derive_host_namespace(self.plugin.namespace, parent_config)
            if host_namespace:
                host_flag = await self._read_flag(f"{host_namespace}.enabled")
                if host_flag is not None:
                    self.plugin.log.silly(f"Using host enabled flag of {host_namespace}: {host_flag}")
                    return host_flag

        return config_default(config)
