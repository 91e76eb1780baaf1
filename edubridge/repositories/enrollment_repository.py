from typing import Any, Dict, List, Optional

from pymongo import ASCENDING, DESCENDING, ReturnDocument

from edubridge.models.enrollment import EnrollmentDocument
from edubridge.repositories.base import BaseRepository, normalize, to_object_id
from edubridge.utils.dates import utcnow


SEAT_HOLDING_STATUSES = ("PENDING", "APPROVED", "COMPLETED")
ACTIVE_STATUSES = ("APPROVED", "COMPLETED")


class EnrollmentRepository(BaseRepository):

    collection_name = "enrollments"

    async def ensure_indexes(self) -> None:
        await self.collection.create_index([("user_id", ASCENDING), ("program_id", ASCENDING)], unique=True)
        await self.collection.create_index([("program_id", ASCENDING), ("status", ASCENDING)])
        await self.collection.create_index([("registered_at", DESCENDING)])

    async def create_enrollment(self, user_id: str, program_id: str, message: str = "", status: str = "PENDING") -> Dict[str, Any]:
        now = utcnow()
        doc: EnrollmentDocument = {
            "user_id": user_id,
            "program_id": program_id,
            "status": status,
            "message": message,
            "registered_at": now,
            "updated_at": now,
        }
        result = await self.collection.insert_one(doc)
        doc["_id"] = str(result.inserted_id)
        return doc

    async def get_for_user_and_program(self, user_id: str, program_id: str) -> Optional[Dict[str, Any]]:
        return normalize(await self.collection.find_one({"user_id": user_id, "program_id": program_id}))

    async def list_all(self) -> List[Dict[str, Any]]:
        return await self._find({}, sort=[("registered_at", DESCENDING)])

    async def list_by_user(self, user_id: str, statuses: Optional[List[str]] = None) -> List[Dict[str, Any]]:
        query: Dict[str, Any] = {"user_id": user_id}
        if statuses:
            query["status"] = {"$in": list(statuses)}
        return await self._find(query, sort=[("registered_at", DESCENDING)])

    async def list_by_program(self, program_id: str, statuses: Optional[List[str]] = None) -> List[Dict[str, Any]]:
        query: Dict[str, Any] = {"program_id": program_id}
        if statuses:
            query["status"] = {"$in": list(statuses)}
        return await self._find(query, sort=[("registered_at", DESCENDING)])

    async def set_status(self, enrollment_id: str, expected_status: str, status: str) -> Optional[Dict[str, Any]]:
        """Compare-and-set on status; None when the row moved on in between."""
        oid = to_object_id(enrollment_id)
        if oid is None:
            return None
        doc = await self.collection.find_one_and_update(
            {"_id": oid, "status": expected_status},
            {"$set": {"status": status, "updated_at": utcnow()}},
            return_document=ReturnDocument.AFTER,
        )
        return normalize(doc)

    async def delete_for_user(self, user_id: str) -> List[Dict[str, Any]]:
        items = await self._find({"user_id": user_id})
        await self.collection.delete_many({"user_id": user_id})
        return items

    async def count(self, query: Dict[str, Any] | None = None) -> int:
        return await self.collection.count_documents(query or {})

    async def count_by_program(self, program_ids: List[str]) -> Dict[str, int]:
        counts = {pid: 0 for pid in program_ids}
        cur = self.collection.find({"program_id": {"$in": list(program_ids)}}, {"program_id": 1})
        async for doc in cur:
            counts[doc["program_id"]] = counts.get(doc["program_id"], 0) + 1
        return counts

    async def count_by_user(self, user_ids: List[str]) -> Dict[str, int]:
        counts = {uid: 0 for uid in user_ids}
        cur = self.collection.find({"user_id": {"$in": list(user_ids)}}, {"user_id": 1})
        async for doc in cur:
            counts[doc["user_id"]] = counts.get(doc["user_id"], 0) + 1
        return counts

    async def statuses_by_program(self, program_ids: List[str]) -> Dict[str, List[str]]:
        result: Dict[str, List[str]] = {pid: [] for pid in program_ids}
        cur = self.collection.find({"program_id": {"$in": list(program_ids)}}, {"program_id": 1, "status": 1})
        async for doc in cur:
            result.setdefault(doc["program_id"], []).append(doc["status"])
        return result
