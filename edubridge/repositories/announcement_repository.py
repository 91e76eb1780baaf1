from typing import Any, Dict, List

from pymongo import ASCENDING, DESCENDING

from edubridge.models.announcement import AnnouncementDocument, AnnouncementCommentDocument
from edubridge.repositories.base import BaseRepository, normalize
from edubridge.utils.dates import utcnow


class AnnouncementRepository(BaseRepository):

    collection_name = "announcements"

    @property
    def comments(self):
        return self._db["announcement_comments"]

    async def ensure_indexes(self) -> None:
        await self.collection.create_index([("program_id", ASCENDING), ("created_at", DESCENDING)])
        await self.comments.create_index([("announcement_id", ASCENDING)])

    async def create_announcement(self, title: str, content: str, program_id: str, created_by_id: str) -> Dict[str, Any]:
        now = utcnow()
        doc: AnnouncementDocument = {
            "title": title,
            "content": content,
            "program_id": program_id,
            "created_by_id": created_by_id,
            "created_at": now,
            "updated_at": now,
        }
        result = await self.collection.insert_one(doc)
        doc["_id"] = str(result.inserted_id)
        return doc

    async def list_by_programs(self, program_ids: List[str]) -> List[Dict[str, Any]]:
        return await self._find({"program_id": {"$in": list(program_ids)}}, sort=[("created_at", DESCENDING)])

    async def add_comment(self, content: str, user_id: str, announcement_id: str) -> Dict[str, Any]:
        doc: AnnouncementCommentDocument = {
            "content": content,
            "user_id": user_id,
            "announcement_id": announcement_id,
            "created_at": utcnow(),
        }
        result = await self.comments.insert_one(doc)
        doc["_id"] = str(result.inserted_id)
        return doc

    async def list_comments(self, announcement_id: str) -> List[Dict[str, Any]]:
        cur = self.comments.find({"announcement_id": announcement_id}).sort("created_at", DESCENDING)
        items = await cur.to_list(length=None)
        return [normalize(it) for it in items]

    async def count_comments(self, announcement_ids: List[str]) -> Dict[str, int]:
        counts = {aid: 0 for aid in announcement_ids}
        cur = self.comments.find({"announcement_id": {"$in": list(announcement_ids)}}, {"announcement_id": 1})
        async for doc in cur:
            counts[doc["announcement_id"]] = counts.get(doc["announcement_id"], 0) + 1
        return counts

    async def delete_comments_for_user(self, user_id: str) -> int:
        result = await self.comments.delete_many({"user_id": user_id})
        return result.deleted_count
