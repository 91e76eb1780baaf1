from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional

from pymongo import ASCENDING, DESCENDING, ReturnDocument

from edubridge.models.attendance import AttendanceDocument
from edubridge.repositories.base import BaseRepository, normalize
from edubridge.utils.dates import utcnow


class AttendanceRepository(BaseRepository):

    collection_name = "attendance"

    async def ensure_indexes(self) -> None:
        await self.collection.create_index(
            [("user_id", ASCENDING), ("program_id", ASCENDING), ("date", ASCENDING)], unique=True
        )
        await self.collection.create_index([("program_id", ASCENDING), ("date", ASCENDING)])

    async def upsert(self, user_id: str, program_id: str, day: datetime, status: str, notes: str) -> AttendanceDocument:
        now = utcnow()
        doc = await self.collection.find_one_and_update(
            {"user_id": user_id, "program_id": program_id, "date": day},
            {
                "$set": {"status": status, "notes": notes, "updated_at": now},
                "$setOnInsert": {"created_at": now},
            },
            upsert=True,
            return_document=ReturnDocument.AFTER,
        )
        return normalize(doc)

    async def list_for_day(self, program_id: str, day: datetime) -> List[Dict[str, Any]]:
        return await self._find({"program_id": program_id, "date": {"$gte": day, "$lt": day + timedelta(days=1)}})

    async def list_for_user(self, user_id: str, program_id: Optional[str] = None) -> List[Dict[str, Any]]:
        query: Dict[str, Any] = {"user_id": user_id}
        if program_id:
            query["program_id"] = program_id
        return await self._find(query, sort=[("date", DESCENDING)])

    async def statuses_for_program(self, program_id: str) -> List[str]:
        cur = self.collection.find({"program_id": program_id}, {"status": 1})
        return [doc["status"] async for doc in cur]

    async def delete_for_user(self, user_id: str) -> int:
        result = await self.collection.delete_many({"user_id": user_id})
        return result.deleted_count
