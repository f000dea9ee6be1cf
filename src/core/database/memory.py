"""
In-memory objects and states databases.

Used when no external store is configured and in tests.
"""
import copy
from typing import Any, Dict, List, Mapping, Optional

from .records import State, merge_object


class MemoryObjectsDB:
    """Dict-backed objects database."""

    def __init__(self, objects: Optional[Mapping[str, Mapping[str, Any]]] = None):
        self._objects: Dict[str, Dict[str, Any]] = {
            k: copy.deepcopy(dict(v)) for k, v in (objects or {}).items()
        }

    async def get_object(self, id: str) -> Optional[Dict[str, Any]]:
        obj = self._objects.get(id)
        return copy.deepcopy(obj) if obj is not None else None

    async def set_object(self, id: str, obj: Mapping[str, Any]) -> str:
        self._objects[id] = copy.deepcopy(dict(obj))
        return id

    async def extend_object(self, id: str, obj: Mapping[str, Any]) -> str:
        self._objects[id] = merge_object(self._objects.get(id, {}), obj)
        return id

    def ids(self) -> List[str]:
        return list(self._objects.keys())

    def __contains__(self, id: str) -> bool:
        return id in self._objects


class MemoryStatesDB:
    """Dict-backed states database."""

    def __init__(self, states: Optional[Mapping[str, State]] = None):
        self._states: Dict[str, State] = dict(states or {})

    async def get_state(self, id: str) -> Optional[State]:
        state = self._states.get(id)
        return state.model_copy() if state is not None else None

    async def set_state(self, id: str, state: State) -> str:
        self._states[id] = state.model_copy()
        return id

    def ids(self) -> List[str]:
        return list(self._states.keys())

    def __contains__(self, id: str) -> bool:
        return id in self._states
