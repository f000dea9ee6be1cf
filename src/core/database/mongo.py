"""
MongoDB-backed objects and states databases.

One document per id, the id stored as "_id".
"""
from typing import Any, Dict, Mapping, Optional

from .records import State, merge_object


class MongoObjectsDB:
    """Objects database on an async pymongo collection."""

    def __init__(self, collection):
        self.collection = collection

    async def get_object(self, id: str) -> Optional[Dict[str, Any]]:
        doc = await self.collection.find_one({"_id": id})
        if doc is None:
            return None
        doc.pop("_id", None)
        return doc

    async def set_object(self, id: str, obj: Mapping[str, Any]) -> str:
        data = dict(obj)
        data["_id"] = id
        await self.collection.replace_one({"_id": id}, data, upsert=True)
        return id

    async def extend_object(self, id: str, obj: Mapping[str, Any]) -> str:
        existing = await self.get_object(id) or {}
        return await self.set_object(id, merge_object(existing, obj))


class MongoStatesDB:
    """States database on an async pymongo collection."""

    def __init__(self, collection):
        self.collection = collection

    async def get_state(self, id: str) -> Optional[State]:
        doc = await self.collection.find_one({"_id": id})
        if doc is None:
            return None
        return State.from_document(doc)

    async def set_state(self, id: str, state: State) -> str:
        data = state.to_document()
        data["_id"] = id
        await self.collection.replace_one({"_id": id}, data, upsert=True)
        return id
