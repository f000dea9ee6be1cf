"""
Plugin Handler.

Owns the plugin slots of one hosting process and drives their lifecycle:
register -> bind databases -> initialize -> destroy.
"""
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union

from ..logging import NamespaceLogger
from .errors import PluginConstructionError, PluginResolutionError
from .protocol import InitResult, ObjectsDB, PluginProtocol, StatesDB
from .registry import PluginRegistry, default_registry
from .settings import HostSettings, PluginSettings

ResolveHints = Optional[Union[str, Sequence[str]]]


@dataclass
class PluginSlot:
    """
    Registration entry of one plugin.

    Attributes:
        name: Plugin name
        config: Plugin configuration as registered
        instance: Live plugin instance (None if construction failed or destroyed)
    """
    name: str
    config: Any
    instance: Optional[PluginProtocol] = None


class PluginHandler:
    """
    Manages plugin registration, database binding and lifecycle.

    One failing plugin never stops the others: construction, initialization
    and destruction errors are logged and only affect the plugin's own slot.

    Usage:
        handler = PluginHandler(HostSettings(namespace="system.adapter.demo.0", log_namespace="demo.0"))
        handler.add_plugins({"sentry": {"enabled": True}}, ["myapp.plugins"])
        handler.bind_databases(objects_db, states_db)
        await handler.initialize_all(io_package)
        ...
        await handler.destroy_all()
    """

    def __init__(self, settings: HostSettings, log: Optional[Any] = None,
                 registry: Optional[PluginRegistry] = None):
        """
        Initialize the plugin handler.

        Args:
            settings: Identity of the hosting adapter/controller
            log: Backing logger handed to the plugins (defaults to loguru)
            registry: Plugin registry (defaults to the global one)
        """
        self.settings = settings
        self._backing_log = log
        self.log = NamespaceLogger(settings.log_namespace, log)
        self.registry = registry if registry is not None else default_registry
        self._slots: Dict[str, PluginSlot] = {}

    # Registration
    def register(self, name: str, config: Any, resolve_hints: ResolveHints = None) -> bool:
        """
        Register a plugin: resolve its factory and construct the instance.

        Args:
            name: Plugin name
            config: Plugin configuration
            resolve_hints: Directories or package prefixes to search

        Returns:
            True if a new instance was constructed
        """
        existing = self._slots.get(name)
        if existing is not None and existing.instance is not None:
            self.log.info(f"Ignore duplicate plugin {name}")
            return False

        slot = PluginSlot(name=name, config=config)
        self._slots[name] = slot

        try:
            factory = self.registry.resolve(name, resolve_hints)
        except PluginResolutionError as e:
            self.log.info(f"Plugin {name} could not be resolved: {e}")
            return False

        plugin_settings = PluginSettings.for_plugin(self.settings, name, self._backing_log)
        try:
            slot.instance = self._construct(name, factory, plugin_settings)
        except PluginConstructionError as e:
            self.log.info(f"Plugin {name} could not be initialized: {e}")
            return False

        self.log.debug(f"Plugin {name} instantiated")
        return True

    @staticmethod
    def _construct(name: str, factory, plugin_settings: PluginSettings) -> PluginProtocol:
        try:
            instance = factory(plugin_settings)
        except Exception as e:
            raise PluginConstructionError(f"{name}: {e}") from e
        if not isinstance(instance, PluginProtocol):
            raise PluginConstructionError(
                f"{name}: {type(instance).__name__} does not implement the plugin contract"
            )
        return instance

    def add_plugins(self, configs: Optional[Mapping[str, Any]], resolve_hints: ResolveHints = None) -> None:
        """
        Register several plugins.

        Args:
            configs: Plugin name -> configuration
            resolve_hints: Directories or package prefixes to search
        """
        if not configs:
            return
        if isinstance(resolve_hints, str):
            resolve_hints = [resolve_hints]

        for name, config in configs.items():
            self.register(name, config, resolve_hints)

    # Databases
    def set_database(self, name: str, objects_db: Optional[ObjectsDB], states_db: Optional[StatesDB]) -> None:
        """Set objects and states databases for one plugin."""
        instance = self.get_instance(name)
        if instance is not None:
            instance.set_database(objects_db, states_db)

    def bind_databases(self, objects_db: Optional[ObjectsDB], states_db: Optional[StatesDB]) -> None:
        """Set objects and states databases for all instantiated plugins."""
        for name in self._slots:
            self.set_database(name, objects_db, states_db)

    # Lifecycle
    async def initialize_one(self, name: str,
                             parent_config: Optional[Mapping[str, Any]] = None) -> Optional[InitResult]:
        """
        Initialize one plugin.

        A plugin that fails is destroyed and evicted from its slot.

        Args:
            name: Plugin name
            parent_config: Package configuration of the adapter/controller

        Returns:
            The init result, or None if the plugin has no instance
        """
        instance = self.get_instance(name)
        if instance is None:
            return None

        try:
            result = await instance.init_plugin(self._slots[name].config, parent_config)
        except Exception as e:
            self.log.error(f"Plugin {name} initialization error: {e}")
            result = InitResult.FAILED

        if result is InitResult.FAILED:
            self.log.debug(f"Plugin {name} destroyed because not initialized correctly")
            await self.destroy_one(name, force=True)
        elif result is InitResult.NOT_ACTIVATED:
            self.log.debug(f"Plugin {name} not activated")
        else:
            self.log.debug(f"Plugin {name} initialized")
        return result

    async def initialize_all(self, parent_config: Optional[Mapping[str, Any]] = None) -> Dict[str, InitResult]:
        """
        Initialize all instantiated plugins, one after the other.

        Args:
            parent_config: Package configuration of the adapter/controller

        Returns:
            Plugin name -> init result for every plugin that had an instance
        """
        results: Dict[str, InitResult] = {}
        for name in list(self._slots.keys()):
            result = await self.initialize_one(name, parent_config)
            if result is not None:
                results[name] = result

        failed = [name for name, result in results.items() if result is InitResult.FAILED]
        self.log.info(f"Initialized {len(results) - len(failed)} of {len(results)} plugins")
        if failed:
            self.log.warn(f"Plugins failed: {', '.join(failed)}")
        return results

    async def destroy_one(self, name: str, force: bool = False) -> bool:
        """
        Destroy one plugin instance.

        Args:
            name: Plugin name
            force: Evict the instance even if its destroy() fails

        Returns:
            True if the instance was evicted
        """
        slot = self._slots.get(name)
        if slot is None or slot.instance is None:
            return False

        try:
            destroyed = await slot.instance.destroy_plugin(force)
        except Exception as e:
            self.log.error(f"Plugin {name} destroy error: {e}")
            destroyed = False

        if not destroyed and not force:
            self.log.info(f"Plugin {name} could not be destroyed")
            return False

        slot.instance = None
        self.log.debug(f"Plugin {name} destroyed")
        return True

    async def destroy_all(self) -> None:
        """Destroy all plugin instances, ignoring their destroy() results."""
        for name in list(self._slots.keys()):
            await self.destroy_one(name, force=True)

    # Queries
    def get_instance(self, name: str) -> Optional[PluginProtocol]:
        """Return the plugin instance or None if not existent or not initialized."""
        slot = self._slots.get(name)
        return slot.instance if slot is not None else None

    def get_config(self, name: str) -> Optional[Any]:
        """Return the plugin configuration or None if not registered."""
        slot = self._slots.get(name)
        return slot.config if slot is not None else None

    def exists(self, name: str) -> bool:
        """Return if the plugin was registered."""
        return name in self._slots

    def is_instantiated(self, name: str) -> bool:
        """Return if the plugin has a live instance."""
        return self.get_instance(name) is not None

    def is_active(self, name: str) -> bool:
        """Return if the plugin has a live, active instance."""
        instance = self.get_instance(name)
        return bool(instance is not None and instance.is_active)

    def names(self) -> List[str]:
        return list(self._slots.keys())

    def __contains__(self, name: str) -> bool:
        return self.exists(name)

    def __len__(self) -> int:
        return len(self._slots)

    def __repr__(self) -> str:
        return f"PluginHandler({self.settings.namespace}, plugins={len(self._slots)})"
