import textwrap
import uuid

import pytest

from src.core.decorators import plugin
from src.core.plugins import (
    PluginBase,
    PluginHandler,
    PluginRegistrationError,
    PluginRegistry,
    PluginResolutionError,
)

from conftest import GoodPlugin

PLUGIN_SOURCE = textwrap.dedent("""
    from src.core.plugins import PluginBase


    class SentryPlugin(PluginBase):
        async def init(self, config):
            self.dsn = config.get("dsn")
            return True
""")


def test_register_and_lookup():
    registry = PluginRegistry()
    registry.register("good", GoodPlugin)

    assert "good" in registry
    assert len(registry) == 1
    assert registry.get("good") is GoodPlugin
    assert registry.resolve("good") is GoodPlugin
    assert registry.names() == ["good"]


def test_duplicate_registration_raises():
    registry = PluginRegistry()
    registry.register("good", GoodPlugin)

    with pytest.raises(PluginRegistrationError):
        registry.register("good", GoodPlugin)

    registry.register("good", PluginBase, replace=True)
    assert registry.get("good") is PluginBase


def test_unregister():
    registry = PluginRegistry()
    registry.register("good", GoodPlugin)
    registry.unregister("good")
    registry.unregister("good")
    assert registry.get("good") is None


def test_unknown_plugin_raises():
    with pytest.raises(PluginResolutionError):
        PluginRegistry().resolve("nothing", ["no_such_package_for_plugins"])


def test_resolve_from_directory_file(tmp_path):
    (tmp_path / "sentry.py").write_text(PLUGIN_SOURCE)
    registry = PluginRegistry()

    factory = registry.resolve("sentry", str(tmp_path))

    assert issubclass(factory, PluginBase)
    assert factory.__name__ == "SentryPlugin"
    # cached for later lookups
    assert registry.get("sentry") is factory


def test_resolve_from_directory_package(tmp_path):
    pkg = tmp_path / "admin_ui"
    pkg.mkdir()
    (pkg / "__init__.py").write_text(PLUGIN_SOURCE)

    factory = PluginRegistry().resolve("admin-ui", [str(tmp_path / "elsewhere"), str(tmp_path)])
    assert factory.__name__ == "SentryPlugin"


def test_resolve_from_package_prefix(tmp_path, monkeypatch):
    package = f"hostplugins_{uuid.uuid4().hex[:8]}"
    pkg = tmp_path / package
    pkg.mkdir()
    (pkg / "__init__.py").write_text("")
    (pkg / "sentry.py").write_text(PLUGIN_SOURCE)
    monkeypatch.syspath_prepend(str(tmp_path))

    factory = PluginRegistry().resolve("sentry", ["missing_prefix_pkg", package])
    assert factory.__module__ == f"{package}.sentry"


def test_module_without_plugin_class(tmp_path):
    (tmp_path / "empty.py").write_text("VALUE = 1\n")
    with pytest.raises(PluginResolutionError):
        PluginRegistry().resolve("empty", str(tmp_path))


def test_module_with_import_error(tmp_path):
    (tmp_path / "needsdep.py").write_text("import definitely_not_installed_dependency\n")
    with pytest.raises(PluginResolutionError) as exc_info:
        PluginRegistry().resolve("needsdep", str(tmp_path))
    assert isinstance(exc_info.value.__cause__, ModuleNotFoundError)


def test_module_with_import_error_in_package(tmp_path, monkeypatch):
    package = f"hostplugins_{uuid.uuid4().hex[:8]}"
    pkg = tmp_path / package
    pkg.mkdir()
    (pkg / "__init__.py").write_text("")
    (pkg / "needsdep.py").write_text("import definitely_not_installed_dependency\n")
    monkeypatch.syspath_prepend(str(tmp_path))

    with pytest.raises(PluginResolutionError):
        PluginRegistry().resolve("needsdep", package)


@pytest.mark.asyncio
async def test_handler_resolves_from_directory(tmp_path, host_settings, objects_db, states_db):
    (tmp_path / "sentry.py").write_text(PLUGIN_SOURCE)
    handler = PluginHandler(host_settings, registry=PluginRegistry())

    handler.add_plugins({"sentry": {"dsn": "https://example"}}, [str(tmp_path)])
    handler.bind_databases(objects_db, states_db)
    await handler.initialize_all()

    assert handler.is_active("sentry")
    assert handler.get_instance("sentry").dsn == "https://example"


def test_plugin_decorator():
    registry = PluginRegistry()

    @plugin("decorated", registry=registry)
    class DecoratedPlugin(PluginBase):
        pass

    @plugin(registry=registry)
    class Other(PluginBase):
        pass

    assert registry.get("decorated") is DecoratedPlugin
    assert registry.get("other") is Other
    assert DecoratedPlugin._plugin_name == "decorated"
