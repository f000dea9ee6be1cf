"""
Base Plugin class.

All plugins should inherit from PluginBase.
"""
from abc import ABC
from enum import Enum
from typing import Any, Dict, Mapping, Optional

from ..database.records import State
from ..logging import NamespaceLogger
from .errors import NotInitializedError, PluginStateError
from .protocol import InitResult, ObjectsDB, StatesDB
from .resolver import EnabledStateResolver
from .settings import PluginScope, PluginSettings


class PluginState(Enum):
    """Plugin lifecycle states."""
    UNBOUND = "unbound"
    BOUND = "bound"
    INITIALIZING = "initializing"
    ACTIVE = "active"
    INACTIVE = "inactive"
    DESTROYED = "destroyed"


class PluginBase(ABC):
    """
    Base class for all plugins.

    Lifecycle: construct -> set_database -> init_plugin -> (active | inactive) -> destroy

    Usage:
        class SentryPlugin(PluginBase):
            async def init(self, config):
                self.client = connect(config["dsn"])
                return True

            async def destroy(self):
                self.client.close()
                return True
    """

    SCOPES = PluginScope

    def __init__(self, settings: PluginSettings):
        """
        Initialize the plugin.

        Called by the plugin handler, never by plugin code.

        Args:
            settings: Identity bundle derived from the hosting process
        """
        self.scope = PluginScope(settings.scope)
        self.namespace = settings.namespace
        self.log = NamespaceLogger(settings.log_namespace, settings.log)
        self.host_config: Dict[str, Any] = dict(settings.host_config or {})
        self.parent_package: Dict[str, Any] = dict(settings.parent_package or {})
        self.parent_config: Dict[str, Any] = {}

        self.objects_db: Optional[ObjectsDB] = None
        self.states_db: Optional[StatesDB] = None

        self.is_active = False
        self._state = PluginState.UNBOUND

    @property
    def state(self) -> PluginState:
        """Get current plugin state."""
        return self._state

    @property
    def is_bound(self) -> bool:
        return self.objects_db is not None and self.states_db is not None

    @property
    def enabled_id(self) -> str:
        """Id of the persisted enabled flag."""
        return f"{self.namespace}.enabled"

    # Override these methods in subclasses
    async def init(self, config: Dict[str, Any]) -> bool:
        """
        Initialize the plugin's business logic.

        Args:
            config: Plugin configuration, "enabled" already set

        Returns:
            True on success. False or an exception discards the instance.
        """
        raise NotImplementedError("Not implemented")

    async def destroy(self) -> bool:
        """
        Release resources on a clean end of the process.

        Returns:
            True if teardown succeeded (or nothing had to be done)
        """
        return True

    # Persistence accessors
    def _require_states_db(self) -> StatesDB:
        if self.states_db is None:
            raise NotInitializedError("States Database not initialized.")
        return self.states_db

    def _require_objects_db(self) -> ObjectsDB:
        if self.objects_db is None:
            raise NotInitializedError("Objects Database not initialized.")
        return self.objects_db

    async def get_state(self, id: str) -> Optional[State]:
        """Get a State from the states database."""
        return await self._require_states_db().get_state(id)

    async def set_state(self, id: str, state: State) -> str:
        """Set a State in the states database."""
        return await self._require_states_db().set_state(id, state)

    async def get_object(self, id: str) -> Optional[Dict[str, Any]]:
        """Get an object from the objects database."""
        return await self._require_objects_db().get_object(id)

    async def set_object(self, id: str, obj: Mapping[str, Any]) -> str:
        """Set an object in the objects database."""
        return await self._require_objects_db().set_object(id, obj)

    async def extend_object(self, id: str, obj: Mapping[str, Any]) -> str:
        """Set or extend an object in the objects database."""
        return await self._require_objects_db().extend_object(id, obj)

    # Internal methods, called by the plugin handler
    async def set_active(self, active: bool) -> None:
        """
        Persist the enabled flag and mirror it in is_active.

        The state is written first so a failed write leaves is_active untouched.
        """
        active = bool(active)
        if active and self._state is PluginState.DESTROYED:
            raise PluginStateError(f"Plugin {self.namespace} is destroyed")
        await self.set_state(self.enabled_id, State(val=active, ack=True, from_=self.namespace))
        self.is_active = active
        if self._state is not PluginState.DESTROYED:
            self._state = PluginState.ACTIVE if active else PluginState.INACTIVE

    def set_database(self, objects_db: Optional[ObjectsDB], states_db: Optional[StatesDB]) -> None:
        """
        Set the objects and states databases used by the accessors.

        Args:
            objects_db: Objects database service
            states_db: States database service
        """
        self.objects_db = objects_db
        self.states_db = states_db
        if self._state is PluginState.UNBOUND and self.is_bound:
            self._state = PluginState.BOUND

    async def init_plugin(self, config: Optional[Mapping[str, Any]],
                          parent_config: Optional[Mapping[str, Any]] = None) -> InitResult:
        """
        Resolve the enabled flag and run init() if the plugin should be active.

        Args:
            config: Plugin configuration from the registration
            parent_config: Package configuration of the adapter/controller using the plugin

        Returns:
            InitResult.SUCCESS, FAILED or NOT_ACTIVATED

        Raises:
            PluginStateError: If the plugin was already destroyed
            NotInitializedError: If the databases are not bound
        """
        if self._state is PluginState.DESTROYED:
            raise PluginStateError(f"Plugin {self.namespace} is destroyed")
        if config is None:
            self.log.error("No configuration for plugin")
            return InitResult.FAILED

        self.parent_config = dict(parent_config or {})
        self._state = PluginState.INITIALIZING

        try:
            activate = await EnabledStateResolver(self).resolve(config, self.parent_config)
            if not activate:
                self.log.debug(f"Do not initialize Plugin (enabled={activate})")
                await self.set_active(False)
                return InitResult.NOT_ACTIVATED
        except Exception:
            self._state = PluginState.INACTIVE
            raise

        plugin_config = dict(config)
        plugin_config["enabled"] = activate

        self.log.debug(f"Initialize Plugin (enabled={activate})")
        try:
            success = bool(await self.init(plugin_config))
            if not success:
                self.log.error("Plugin init reported failure")
        except Exception as e:
            self.log.error(f"Plugin init failed: {e}")
            success = False

        try:
            await self.set_active(success)
        except Exception:
            self._state = PluginState.INACTIVE
            raise
        return InitResult.SUCCESS if success else InitResult.FAILED

    async def destroy_plugin(self, force: bool = False) -> bool:
        """
        Run destroy() and decide whether the instance may be discarded.

        Args:
            force: Consider the plugin destroyed even if destroy() fails

        Returns:
            True if the instance is destroyed and may be evicted
        """
        if self._state is PluginState.DESTROYED:
            return True

        try:
            success = bool(await self.destroy())
        except Exception as e:
            self.log.error(f"Plugin destroy failed: {e}")
            success = False

        if not success and not force:
            self.log.warn("Plugin could not be destroyed")
            return False

        if success and not force and self.is_bound:
            try:
                await self.set_active(False)
            except Exception as e:
                self.log.error(f"Could not persist disabled state: {e}")

        self._state = PluginState.DESTROYED
        return True

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.namespace}, state={self._state.value}, active={self.is_active})"
