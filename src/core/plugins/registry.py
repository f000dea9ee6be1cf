"""
Plugin Registry.

Maps plugin names to factories. Names that were not registered explicitly
are looked up in the given search locations: plugin directories or dotted
package prefixes.
"""
import importlib
import importlib.util
import os
import sys
from pathlib import Path
from types import ModuleType
from typing import Callable, Dict, List, Optional, Sequence, Union

from loguru import logger

from .errors import PluginRegistrationError, PluginResolutionError
from .protocol import PluginProtocol
from .settings import PluginSettings

PluginFactory = Callable[[PluginSettings], PluginProtocol]


def module_name_for(name: str) -> str:
    """Python module name used to look up plugin `name`."""
    return name.replace("-", "_")


class PluginRegistry:
    """
    Name -> factory mapping used by the plugin handler.

    Usage:
        registry = PluginRegistry()
        registry.register("sentry", SentryPlugin)
        factory = registry.resolve("sentry")
    """

    def __init__(self):
        self._factories: Dict[str, PluginFactory] = {}

    def register(self, name: str, factory: PluginFactory, replace: bool = False) -> None:
        """
        Register a plugin factory.

        Args:
            name: Plugin name
            factory: Class or callable taking PluginSettings
            replace: Overwrite an existing registration

        Raises:
            PluginRegistrationError: If the name is taken and replace is False
        """
        if name in self._factories and not replace:
            raise PluginRegistrationError(f"Plugin {name} already registered")
        self._factories[name] = factory
        logger.debug(f"Registered plugin factory: {name}")

    def unregister(self, name: str) -> None:
        self._factories.pop(name, None)

    def get(self, name: str) -> Optional[PluginFactory]:
        return self._factories.get(name)

    def names(self) -> List[str]:
        return list(self._factories.keys())

    def __contains__(self, name: str) -> bool:
        return name in self._factories

    def __len__(self) -> int:
        return len(self._factories)

    def resolve(self, name: str, resolve_hints: Optional[Union[str, Sequence[str]]] = None) -> PluginFactory:
        """
        Find the factory for a plugin.

        Args:
            name: Plugin name
            resolve_hints: Directories or package prefixes to search, in order

        Returns:
            The plugin factory

        Raises:
            PluginResolutionError: If the plugin cannot be found or loaded
        """
        factory = self._factories.get(name)
        if factory is not None:
            return factory

        if isinstance(resolve_hints, str):
            resolve_hints = [resolve_hints]

        for hint in resolve_hints or []:
            module = self._load_module(name, hint)
            if module is None:
                continue
            plugin_cls = self._find_plugin_class(module)
            if plugin_cls is None:
                raise PluginResolutionError(f"Module {module.__name__} defines no plugin class")
            self._factories[name] = plugin_cls
            logger.debug(f"Resolved plugin {name} from {hint}")
            return plugin_cls

        raise PluginResolutionError(f"Plugin {name} could not be resolved")

    def _load_module(self, name: str, hint: str) -> Optional[ModuleType]:
        mod_name = module_name_for(name)
        path = Path(hint)
        if path.is_dir():
            return self._load_from_directory(name, path / mod_name)
        if os.sep in hint or (os.altsep and os.altsep in hint):
            # A directory that does not exist
            return None

        qualified = f"{hint}.{mod_name}"
        try:
            return importlib.import_module(qualified)
        except ModuleNotFoundError as e:
            # Only a missing plugin module means "not here", a missing dependency is an error
            if e.name is not None and (qualified == e.name or qualified.startswith(f"{e.name}.")):
                return None
            raise PluginResolutionError(f"Plugin {name} could not be imported: {e}") from e
        except Exception as e:
            raise PluginResolutionError(f"Plugin {name} could not be imported: {e}") from e

    def _load_from_directory(self, name: str, base: Path) -> Optional[ModuleType]:
        module_file = base.parent / f"{base.name}.py"
        if module_file.is_file():
            entry = module_file
        elif (base / "__init__.py").is_file():
            entry = base / "__init__.py"
        else:
            return None

        module_name = f"plugin_host_plugin_{module_name_for(name)}"
        spec = importlib.util.spec_from_file_location(module_name, entry)
        if spec is None or spec.loader is None:
            raise PluginResolutionError(f"Failed to create module spec for {entry}")

        module = importlib.util.module_from_spec(spec)
        sys.modules[module_name] = module
        try:
            spec.loader.exec_module(module)
        except Exception as e:
            sys.modules.pop(module_name, None)
            raise PluginResolutionError(f"Plugin {name} could not be loaded from {entry}: {e}") from e
        return module

    @staticmethod
    def _find_plugin_class(module: ModuleType) -> Optional[type]:
        from .plugin_base import PluginBase

        # Find PluginBase subclass
        for attr_name in dir(module):
            attr = getattr(module, attr_name)
            if (isinstance(attr, type) and
                    issubclass(attr, PluginBase) and
                    attr is not PluginBase and
                    attr.__module__ == module.__name__):
                return attr
        return None


# Global instance used by the @plugin decorator
default_registry = PluginRegistry()
