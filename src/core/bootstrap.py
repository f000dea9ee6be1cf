"""
Bootstrap helpers for plugin hosts.

Simplifies handler setup and initialization.
"""
from typing import Any, Optional, Union

from loguru import logger

from .config import AppConfig, ConfigManager
from .database.memory import MemoryObjectsDB, MemoryStatesDB
from .plugins.plugin_handler import PluginHandler
from .plugins.protocol import ObjectsDB, StatesDB
from .plugins.registry import PluginRegistry


class PluginHostBuilder:
    """
    Fluent builder for a plugin handler.

    Example:
        handler = await (PluginHostBuilder()
                         .with_config("config.json")
                         .with_logging()
                         .with_mongo()
                         .build())
    """

    def __init__(self, config: Optional[Union[str, AppConfig]] = None):
        """
        Initialize host builder.

        Args:
            config: Path to a config file or a ready AppConfig
        """
        self._config: AppConfig = AppConfig()
        self._registry: Optional[PluginRegistry] = None
        self._log: Optional[Any] = None
        self._objects_db: Optional[ObjectsDB] = None
        self._states_db: Optional[StatesDB] = None
        self._use_mongo = False
        self._logging_configured = False
        self.mongo = None
        if config is not None:
            self.with_config(config)

    @property
    def config(self) -> AppConfig:
        return self._config

    def with_config(self, config: Union[str, AppConfig]):
        """
        Use a config file path or an AppConfig.

        Returns:
            Self for chaining
        """
        if isinstance(config, AppConfig):
            self._config = config
        else:
            self._config = ConfigManager(config).data
        return self

    def with_logging(self, enable: bool = True):
        """
        Configure logging setup.

        Returns:
            Self for chaining
        """
        self._logging_configured = enable
        return self

    def with_logger(self, log: Any):
        """Backing logger handed to the handler and plugins."""
        self._log = log
        return self

    def with_registry(self, registry: PluginRegistry):
        self._registry = registry
        return self

    def with_databases(self, objects_db: ObjectsDB, states_db: StatesDB):
        """
        Use the given persistence services.

        Returns:
            Self for chaining
        """
        self._objects_db = objects_db
        self._states_db = states_db
        return self

    def with_mongo(self, enable: bool = True):
        """Store objects and states in MongoDB (settings from config.mongo)."""
        self._use_mongo = enable
        return self

    def _open_databases(self):
        if self._objects_db is not None and self._states_db is not None:
            return self._objects_db, self._states_db

        if self._use_mongo:
            from .database.manager import MongoManager
            from .database.mongo import MongoObjectsDB, MongoStatesDB

            self.mongo = MongoManager(self._config.mongo)
            self.mongo.init()
            return (
                MongoObjectsDB(self.mongo.get_collection(self._config.mongo.objects_collection)),
                MongoStatesDB(self.mongo.get_collection(self._config.mongo.states_collection)),
            )

        logger.debug("No persistence configured, using in-memory databases")
        return MemoryObjectsDB(), MemoryStatesDB()

    async def build(self) -> PluginHandler:
        """
        Register, bind and initialize all configured plugins.

        Returns:
            PluginHandler with all plugins initialized
        """
        # 1. Setup logging
        if self._logging_configured:
            from .logging import setup_logging
            setup_logging(self._config.logging.debug_mode, self._config.logging.log_dir)
            logger.info(f"Starting plugin host {self._config.host.namespace}")

        # 2. Register plugins
        handler = PluginHandler(self._config.host, log=self._log, registry=self._registry)
        handler.add_plugins(self._config.plugins, self._config.resolve_dirs)

        # 3. Bind databases
        objects_db, states_db = self._open_databases()
        handler.bind_databases(objects_db, states_db)

        # 4. Initialize plugins
        await handler.initialize_all(self._config.parent_config)
        return handler

    async def close(self):
        """Close the MongoDB client opened by build()."""
        if self.mongo is not None:
            await self.mongo.close()
            self.mongo = None
