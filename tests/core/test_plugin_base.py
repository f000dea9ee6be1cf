import pytest
from unittest.mock import AsyncMock

from src.core.database.records import State
from src.core.plugins import (
    InitResult,
    NotInitializedError,
    PluginProtocol,
    PluginScope,
    PluginState,
    PluginStateError,
)

from conftest import DefaultPlugin, FalsePlugin, GoodPlugin, RaisingPlugin, StubbornPlugin


# --- Construction / binding ---
def test_construct_identity(make_plugin):
    plugin = make_plugin(bind=False)

    assert plugin.scope is PluginScope.ADAPTER
    assert plugin.namespace == "system.adapter.demo.0.plugins.test"
    assert plugin.log.namespace == "demo.0 Plugin test"
    assert plugin.objects_db is None and plugin.states_db is None
    assert plugin.is_active is False
    assert plugin.state is PluginState.UNBOUND
    assert plugin.SCOPES.CONTROLLER == "controller"
    assert isinstance(plugin, PluginProtocol)


def test_set_database_binds(make_plugin, objects_db, states_db):
    plugin = make_plugin(bind=False)
    plugin.set_database(objects_db, states_db)

    assert plugin.is_bound
    assert plugin.state is PluginState.BOUND


@pytest.mark.asyncio
@pytest.mark.parametrize("call", [
    lambda p: p.get_state("x"),
    lambda p: p.set_state("x", State(val=1)),
    lambda p: p.get_object("x"),
    lambda p: p.set_object("x", {}),
    lambda p: p.extend_object("x", {}),
    lambda p: p.set_active(True),
])
async def test_accessors_require_binding(make_plugin, call):
    plugin = make_plugin(bind=False)
    with pytest.raises(NotInitializedError):
        await call(plugin)


@pytest.mark.asyncio
async def test_accessors_proxy_to_databases(make_plugin, objects_db, states_db):
    plugin = make_plugin()
    await plugin.set_object("a.b", {"type": "state"})
    await plugin.extend_object("a.b", {"common": {"name": "x"}})
    await plugin.set_state("a.b", State(val=42))

    assert await plugin.get_object("a.b") == {"type": "state", "common": {"name": "x"}}
    assert (await plugin.get_state("a.b")).val == 42
    assert "a.b" in objects_db and "a.b" in states_db


# --- Initialization ---
@pytest.mark.asyncio
async def test_successful_init(make_plugin, states_db, parent_config):
    plugin = make_plugin(GoodPlugin)
    config = {"dsn": "https://example"}

    result = await plugin.init_plugin(config, parent_config)

    assert result is InitResult.SUCCESS
    assert plugin.is_active is True
    assert plugin.state is PluginState.ACTIVE
    assert plugin.received_config == {"dsn": "https://example", "enabled": True}
    assert config == {"dsn": "https://example"}
    assert plugin.parent_config == parent_config

    state = await states_db.get_state(plugin.enabled_id)
    assert state.val is True
    assert state.ack is True
    assert state.from_ == plugin.namespace


@pytest.mark.asyncio
@pytest.mark.parametrize("cls", [FalsePlugin, RaisingPlugin, DefaultPlugin])
async def test_failed_init_persists_disabled(make_plugin, states_db, cls):
    plugin = make_plugin(cls)

    result = await plugin.init_plugin({})

    assert result is InitResult.FAILED
    assert plugin.is_active is False
    assert plugin.state is PluginState.INACTIVE
    assert (await states_db.get_state(plugin.enabled_id)).val is False


@pytest.mark.asyncio
async def test_not_activated_skips_hook(make_plugin, states_db):
    plugin = make_plugin(GoodPlugin)

    result = await plugin.init_plugin({"enabled": False})

    assert result is InitResult.NOT_ACTIVATED
    assert result.ok
    assert plugin.init_calls == 0
    assert plugin.is_active is False
    assert plugin.state is PluginState.INACTIVE
    state = await states_db.get_state(plugin.enabled_id)
    assert state.val is False and state.ack is True


@pytest.mark.asyncio
async def test_persisted_flag_reactivates(make_plugin, states_db):
    plugin = make_plugin(GoodPlugin)
    await states_db.set_state(plugin.enabled_id, State(val=True, ack=True))

    assert await plugin.init_plugin({"enabled": False}) is InitResult.SUCCESS
    assert plugin.received_config["enabled"] is True


@pytest.mark.asyncio
async def test_missing_config_fails(make_plugin):
    plugin = make_plugin(GoodPlugin)
    assert await plugin.init_plugin(None) is InitResult.FAILED
    assert plugin.init_calls == 0


@pytest.mark.asyncio
async def test_init_after_destroy_rejected(make_plugin):
    plugin = make_plugin(GoodPlugin)
    assert await plugin.destroy_plugin(force=True)

    with pytest.raises(PluginStateError):
        await plugin.init_plugin({})


@pytest.mark.asyncio
async def test_set_active_write_failure_keeps_flag(make_plugin, objects_db):
    failing_states = AsyncMock()
    failing_states.set_state.side_effect = ConnectionError("store down")
    plugin = make_plugin(bind=False)
    plugin.set_database(objects_db, failing_states)

    with pytest.raises(ConnectionError):
        await plugin.set_active(True)
    assert plugin.is_active is False


@pytest.mark.asyncio
async def test_unbound_init_leaves_inactive(make_plugin):
    plugin = make_plugin(GoodPlugin, bind=False)

    with pytest.raises(NotInitializedError):
        await plugin.init_plugin({})
    assert plugin.state is PluginState.INACTIVE
    assert plugin.init_calls == 0


@pytest.mark.asyncio
async def test_no_reactivation_after_destroy(make_plugin, states_db):
    plugin = make_plugin(GoodPlugin)
    await plugin.init_plugin({})
    assert await plugin.destroy_plugin() is True

    with pytest.raises(PluginStateError):
        await plugin.set_active(True)
    assert plugin.is_active is False
    assert (await states_db.get_state(plugin.enabled_id)).val is False


# --- Destruction ---
@pytest.mark.asyncio
async def test_destroy_success_persists_disabled(make_plugin, states_db):
    plugin = make_plugin(GoodPlugin)
    await plugin.init_plugin({})

    assert await plugin.destroy_plugin() is True
    assert plugin.destroy_calls == 1
    assert plugin.state is PluginState.DESTROYED
    assert plugin.is_active is False
    assert (await states_db.get_state(plugin.enabled_id)).val is False


@pytest.mark.asyncio
async def test_destroy_failure_keeps_instance(make_plugin):
    plugin = make_plugin(StubbornPlugin)
    await plugin.init_plugin({})

    assert await plugin.destroy_plugin() is False
    assert plugin.state is PluginState.ACTIVE
    assert plugin.is_active is True


@pytest.mark.asyncio
async def test_forced_destroy(make_plugin, states_db):
    plugin = make_plugin(StubbornPlugin)
    await plugin.init_plugin({})

    assert await plugin.destroy_plugin(force=True) is True
    assert plugin.state is PluginState.DESTROYED
    # forced destroy does not touch the persisted flag
    assert (await states_db.get_state(plugin.enabled_id)).val is True
    # already destroyed: hook is not called again
    assert await plugin.destroy_plugin() is True
    assert plugin.destroy_calls == 1


@pytest.mark.asyncio
async def test_destroy_hook_exception(make_plugin):
    plugin = make_plugin(GoodPlugin)
    plugin.destroy = AsyncMock(side_effect=RuntimeError("teardown"))

    assert await plugin.destroy_plugin() is False
    assert await plugin.destroy_plugin(force=True) is True


@pytest.mark.asyncio
async def test_destroy_unbound_plugin(make_plugin):
    plugin = make_plugin(GoodPlugin, bind=False)
    assert await plugin.destroy_plugin() is True
    assert plugin.state is PluginState.DESTROYED
