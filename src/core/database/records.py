"""
Persistence records shared by the objects and states services.
"""
import copy
import time
from typing import Any, Dict, Mapping
from pydantic import BaseModel, ConfigDict, Field


class State(BaseModel):
    """
    A value stored in the states database.

    Attributes:
        val: The value itself
        ack: True when the value was confirmed by its owner
        from_: Origin of the write (serialized as "from")
        ts: Write timestamp, epoch seconds
    """
    model_config = ConfigDict(populate_by_name=True)

    val: Any = None
    ack: bool = False
    from_: str = Field(default="", alias="from")
    ts: float = Field(default_factory=time.time)

    def to_document(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True)

    @classmethod
    def from_document(cls, doc: Mapping[str, Any]) -> "State":
        data = {k: v for k, v in doc.items() if k != "_id"}
        return cls.model_validate(data)


def merge_object(base: Mapping[str, Any], patch: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Deep-merge `patch` into a copy of `base`.

    Nested mappings are merged key by key, any other value replaces the old one.
    """
    result = copy.deepcopy(dict(base))
    for key, value in patch.items():
        if isinstance(value, Mapping) and isinstance(result.get(key), Mapping):
            result[key] = merge_object(result[key], value)
        else:
            result[key] = copy.deepcopy(value)
    return result
