"""
Protocol definitions for the plugin host.

Provides Protocol-based interfaces for structural typing: the persistence
services consumed by plugins and the lifecycle contract every plugin
instance must satisfy. The handler checks constructed instances against
PluginProtocol instead of probing for single methods.
"""
from enum import Enum
from typing import Protocol, Dict, Any, Optional, Mapping, runtime_checkable

from ..database.records import State


class InitResult(Enum):
    """Outcome of a plugin initialization."""
    SUCCESS = "success"
    FAILED = "failed"
    NOT_ACTIVATED = "not_activated"

    @property
    def ok(self) -> bool:
        """True unless the plugin failed and must be discarded."""
        return self is not InitResult.FAILED


@runtime_checkable
class ObjectsDB(Protocol):
    """
    Protocol for the objects database.

    Objects are JSON-like dicts addressed by a dotted string id.
    """

    async def get_object(self, id: str) -> Optional[Dict[str, Any]]:
        """Return the object or None when absent."""
        ...

    async def set_object(self, id: str, obj: Mapping[str, Any]) -> str:
        """Store (replace) an object, return its id."""
        ...

    async def extend_object(self, id: str, obj: Mapping[str, Any]) -> str:
        """Deep-merge into an existing object or create it, return its id."""
        ...


@runtime_checkable
class StatesDB(Protocol):
    """Protocol for the states database."""

    async def get_state(self, id: str) -> Optional[State]:
        """Return the state or None when absent."""
        ...

    async def set_state(self, id: str, state: State) -> str:
        """Store a state, return its id."""
        ...


@runtime_checkable
class PluginProtocol(Protocol):
    """
    Lifecycle contract of a plugin instance.

    PluginBase implements everything except the business logic in init().
    """
    namespace: str
    is_active: bool

    async def init(self, config: Dict[str, Any]) -> bool:
        ...

    async def destroy(self) -> bool:
        ...

    async def set_active(self, active: bool) -> None:
        ...

    def set_database(self, objects_db: Optional[ObjectsDB], states_db: Optional[StatesDB]) -> None:
        ...

    async def init_plugin(self, config: Optional[Mapping[str, Any]],
                          parent_config: Optional[Mapping[str, Any]] = None) -> InitResult:
        ...

    async def destroy_plugin(self, force: bool = False) -> bool:
        ...

    async def get_state(self, id: str) -> Optional[State]:
        ...

    async def set_state(self, id: str, state: State) -> str:
        ...

    async def get_object(self, id: str) -> Optional[Dict[str, Any]]:
        ...

    async def set_object(self, id: str, obj: Mapping[str, Any]) -> str:
        ...

    async def extend_object(self, id: str, obj: Mapping[str, Any]) -> str:
        ...
