import pytest
from src.core.plugins import HostSettings, PluginBase, PluginRegistry, PluginScope, PluginSettings
from src.core.database.memory import MemoryObjectsDB, MemoryStatesDB

ADAPTER_NAMESPACE = "system.adapter.demo.0"


# --- Sample plugins ---
class GoodPlugin(PluginBase):
    def __init__(self, settings):
        super().__init__(settings)
        self.received_config = None
        self.init_calls = 0
        self.destroy_calls = 0

    async def init(self, config):
        self.init_calls += 1
        self.received_config = config
        return True

    async def destroy(self):
        self.destroy_calls += 1
        return True


class FalsePlugin(GoodPlugin):
    async def init(self, config):
        self.init_calls += 1
        return False


class RaisingPlugin(GoodPlugin):
    async def init(self, config):
        self.init_calls += 1
        raise RuntimeError("boom")


class StubbornPlugin(GoodPlugin):
    async def destroy(self):
        self.destroy_calls += 1
        return False


class DefaultPlugin(PluginBase):
    pass


class BrokenConstructorPlugin(PluginBase):
    def __init__(self, settings):
        raise ValueError("cannot construct")


# --- Fixtures ---
@pytest.fixture
def host_settings():
    return HostSettings(
        scope=PluginScope.ADAPTER,
        namespace=ADAPTER_NAMESPACE,
        log_namespace="demo.0",
    )


@pytest.fixture
def parent_config():
    # io-package style metadata of the adapter using the plugins
    return {"common": {"name": "demo", "host": "myhost"}}


@pytest.fixture
def objects_db():
    return MemoryObjectsDB()


@pytest.fixture
def states_db():
    return MemoryStatesDB()


@pytest.fixture
def registry():
    reg = PluginRegistry()
    reg.register("good", GoodPlugin)
    reg.register("false", FalsePlugin)
    reg.register("boom", RaisingPlugin)
    reg.register("stubborn", StubbornPlugin)
    reg.register("default", DefaultPlugin)
    reg.register("broken", BrokenConstructorPlugin)
    return reg


@pytest.fixture
def make_plugin(host_settings, objects_db, states_db):
    """Build a plugin instance, bound to the in-memory databases unless bind=False."""
    def _make(cls=GoodPlugin, name="test", scope=None, bind=True):
        settings = PluginSettings.for_plugin(host_settings, name)
        if scope is not None:
            settings.scope = scope
        instance = cls(settings)
        if bind:
            instance.set_database(objects_db, states_db)
        return instance
    return _make
