from typing import Any, Dict, List

from pymongo import ASCENDING, DESCENDING

from edubridge.models.chat import ChatSessionDocument, ChatMessageDocument
from edubridge.repositories.base import BaseRepository, normalize, to_object_id
from edubridge.utils.dates import utcnow


class ChatRepository(BaseRepository):

    collection_name = "chat_sessions"

    @property
    def messages(self):
        return self._db["chat_messages"]

    async def ensure_indexes(self) -> None:
        await self.collection.create_index([("user_id", ASCENDING), ("updated_at", DESCENDING)])
        await self.messages.create_index([("session_id", ASCENDING), ("created_at", ASCENDING)])

    async def create_session(self, user_id: str, title: str) -> Dict[str, Any]:
        now = utcnow()
        doc: ChatSessionDocument = {"user_id": user_id, "title": title, "created_at": now, "updated_at": now}
        result = await self.collection.insert_one(doc)
        doc["_id"] = str(result.inserted_id)
        return doc

    async def touch(self, session_id: str) -> None:
        oid = to_object_id(session_id)
        if oid is None:
            return
        await self.collection.update_one({"_id": oid}, {"$set": {"updated_at": utcnow()}})

    async def list_sessions(self, user_id: str) -> List[Dict[str, Any]]:
        return await self._find({"user_id": user_id}, sort=[("updated_at", DESCENDING)])

    async def add_message(self, session_id: str, content: str, is_user_message: bool) -> Dict[str, Any]:
        doc: ChatMessageDocument = {
            "session_id": session_id,
            "content": content,
            "is_user_message": is_user_message,
            "created_at": utcnow(),
        }
        result = await self.messages.insert_one(doc)
        doc["_id"] = str(result.inserted_id)
        return doc

    async def list_messages(self, session_id: str) -> List[Dict[str, Any]]:
        cur = self.messages.find({"session_id": session_id}).sort([("created_at", ASCENDING), ("_id", ASCENDING)])
        items = await cur.to_list(length=None)
        return [normalize(it) for it in items]

    async def delete_for_user(self, user_id: str) -> int:
        sessions = await self.list_sessions(user_id)
        session_ids = [s["_id"] for s in sessions]
        if session_ids:
            await self.messages.delete_many({"session_id": {"$in": session_ids}})
        result = await self.collection.delete_many({"user_id": user_id})
        return result.deleted_count
