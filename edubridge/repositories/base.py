from typing import Any, Dict, Iterable, List, Optional

from bson import ObjectId
from bson.errors import InvalidId
from motor.motor_asyncio import AsyncIOMotorDatabase


def to_object_id(value: str) -> Optional[ObjectId]:
    if isinstance(value, ObjectId):
        return value
    try:
        return ObjectId(value)
    except (InvalidId, TypeError):
        return None


def to_object_ids(values: Iterable[str]) -> List[ObjectId]:
    oids = []
    for value in values:
        oid = to_object_id(value)
        if oid is not None:
            oids.append(oid)
    return oids


def normalize(doc: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    """Turn the ObjectId primary key into a string for the API layer."""
    if doc is None:
        return None
    doc["_id"] = str(doc["_id"])
    return doc


class BaseRepository:

    collection_name: str = ""

    def __init__(self, db: AsyncIOMotorDatabase) -> None:
        self._db = db

    @property
    def collection(self):
        return self._db[self.collection_name]

    async def get_by_id(self, doc_id: str) -> Optional[Dict[str, Any]]:
        oid = to_object_id(doc_id)
        if oid is None:
            return None
        return normalize(await self.collection.find_one({"_id": oid}))

    async def delete_by_id(self, doc_id: str) -> bool:
        oid = to_object_id(doc_id)
        if oid is None:
            return False
        result = await self.collection.delete_one({"_id": oid})
        return result.deleted_count > 0

    async def _find(self, query: Dict[str, Any], sort=None, limit: int = 0) -> List[Dict[str, Any]]:
        cur = self.collection.find(query)
        if sort:
            cur = cur.sort(sort)
        if limit:
            cur = cur.limit(limit)
        items = await cur.to_list(length=limit or None)
        for it in items:
            normalize(it)
        return items
