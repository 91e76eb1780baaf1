from typing import Any, Dict, List, Optional

from pymongo import ASCENDING, DESCENDING, ReturnDocument

from edubridge.models.program import ProgramDocument
from edubridge.repositories.base import BaseRepository, normalize, to_object_id, to_object_ids
from edubridge.utils.dates import utcnow


class ProgramRepository(BaseRepository):

    collection_name = "programs"

    async def create_program(self, data: Dict[str, Any], created_by_id: str) -> Dict[str, Any]:
        now = utcnow()
        doc: ProgramDocument = {
            "name": data["name"],
            "description": data["description"],
            "duration": data["duration"],
            "capacity": data["capacity"],
            "start_date": data.get("start_date"),
            "end_date": data.get("end_date"),
            "status": data.get("status") or "UPCOMING",
            "created_by_id": created_by_id,
            "seats_taken": 0,
            "created_at": now,
            "updated_at": now,
        }
        result = await self.collection.insert_one(doc)
        doc["_id"] = str(result.inserted_id)
        return doc

    async def list_programs(self, created_by_id: Optional[str] = None) -> List[Dict[str, Any]]:
        query: Dict[str, Any] = {}
        if created_by_id:
            query["created_by_id"] = created_by_id
        return await self._find(query, sort=[("created_at", DESCENDING)])

    async def list_by_ids(self, program_ids: List[str]) -> Dict[str, Dict[str, Any]]:
        items = await self._find({"_id": {"$in": to_object_ids(set(program_ids))}})
        return {it["_id"]: it for it in items}

    async def list_by_status(self, statuses: List[str], sort=None, limit: int = 0) -> List[Dict[str, Any]]:
        return await self._find({"status": {"$in": statuses}}, sort=sort, limit=limit)

    async def update_program(self, program_id: str, fields: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        oid = to_object_id(program_id)
        if oid is None:
            return None
        fields = dict(fields)
        fields["updated_at"] = utcnow()
        doc = await self.collection.find_one_and_update(
            {"_id": oid}, {"$set": fields}, return_document=ReturnDocument.AFTER
        )
        return normalize(doc)

    async def claim_seat(self, program_id: str, capacity: int) -> bool:
        """Atomically take one seat if the program still has room."""
        oid = to_object_id(program_id)
        if oid is None:
            return False
        doc = await self.collection.find_one_and_update(
            {"_id": oid, "seats_taken": {"$lt": capacity}},
            {"$inc": {"seats_taken": 1}, "$set": {"updated_at": utcnow()}},
            return_document=ReturnDocument.AFTER,
        )
        return doc is not None

    async def release_seat(self, program_id: str) -> None:
        oid = to_object_id(program_id)
        if oid is None:
            return
        await self.collection.update_one(
            {"_id": oid, "seats_taken": {"$gt": 0}},
            {"$inc": {"seats_taken": -1}, "$set": {"updated_at": utcnow()}},
        )

    async def upcoming_active(self, before, limit: int = 3) -> List[Dict[str, Any]]:
        return await self._find(
            {"status": "ACTIVE", "start_date": {"$lte": before}},
            sort=[("start_date", ASCENDING)],
            limit=limit,
        )

    async def count(self, query: Dict[str, Any] | None = None) -> int:
        return await self.collection.count_documents(query or {})
