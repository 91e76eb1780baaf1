from typing import Any, Dict, List, Optional

from pymongo import ASCENDING, DESCENDING

from edubridge.models.message import MessageDocument, MessageGroupDocument
from edubridge.repositories.base import BaseRepository, normalize, to_object_id
from edubridge.utils.dates import utcnow


class MessageRepository(BaseRepository):

    collection_name = "messages"

    async def ensure_indexes(self) -> None:
        await self.collection.create_index([("sender_id", ASCENDING), ("receiver_id", ASCENDING), ("created_at", ASCENDING)])
        await self.collection.create_index([("receiver_id", ASCENDING), ("is_read", ASCENDING)])
        await self.collection.create_index([("group_id", ASCENDING), ("created_at", ASCENDING)])

    async def save_message(
        self,
        sender_id: str,
        content: str,
        receiver_id: Optional[str] = None,
        group_id: Optional[str] = None,
    ) -> Dict[str, Any]:
        doc: MessageDocument = {
            "content": content,
            "sender_id": sender_id,
            "receiver_id": receiver_id,
            "group_id": group_id,
            "is_read": False,
            "created_at": utcnow(),
        }
        result = await self.collection.insert_one(doc)
        doc["_id"] = str(result.inserted_id)
        return doc

    async def get_thread(self, user_id: str, partner_id: str) -> List[Dict[str, Any]]:
        query = {
            "group_id": None,
            "$or": [
                {"sender_id": user_id, "receiver_id": partner_id},
                {"sender_id": partner_id, "receiver_id": user_id},
            ],
        }
        return await self._find(query, sort=[("created_at", ASCENDING), ("_id", ASCENDING)])

    async def get_direct_messages(self, user_id: str) -> List[Dict[str, Any]]:
        """Every non-group message the user sent or received, newest first."""
        query = {"group_id": None, "$or": [{"sender_id": user_id}, {"receiver_id": user_id}]}
        return await self._find(query, sort=[("created_at", DESCENDING), ("_id", DESCENDING)])

    async def get_group_messages(self, group_id: str) -> List[Dict[str, Any]]:
        return await self._find({"group_id": group_id}, sort=[("created_at", ASCENDING), ("_id", ASCENDING)])

    async def latest_for_groups(self, group_ids: List[str]) -> Dict[str, Dict[str, Any]]:
        latest: Dict[str, Dict[str, Any]] = {}
        cur = self.collection.find({"group_id": {"$in": list(group_ids)}}).sort([("created_at", DESCENDING), ("_id", DESCENDING)])
        async for doc in cur:
            if doc["group_id"] not in latest:
                latest[doc["group_id"]] = normalize(doc)
        return latest

    async def mark_read(self, receiver_id: str, sender_id: str) -> int:
        result = await self.collection.update_many(
            {"sender_id": sender_id, "receiver_id": receiver_id, "group_id": None, "is_read": False},
            {"$set": {"is_read": True}},
        )
        return result.modified_count or 0

    async def count_unread(self, receiver_id: str) -> int:
        return await self.collection.count_documents({"receiver_id": receiver_id, "group_id": None, "is_read": False})

    async def delete_for_user(self, user_id: str) -> int:
        result = await self.collection.delete_many({"$or": [{"sender_id": user_id}, {"receiver_id": user_id}]})
        return result.deleted_count


class MessageGroupRepository(BaseRepository):

    collection_name = "message_groups"

    async def ensure_indexes(self) -> None:
        await self.collection.create_index([("member_ids", ASCENDING)])

    async def create_group(self, name: str, created_by_id: str, member_ids: List[str], program_id: Optional[str] = None) -> Dict[str, Any]:
        now = utcnow()
        doc: MessageGroupDocument = {
            "name": name,
            "program_id": program_id,
            "created_by_id": created_by_id,
            "member_ids": member_ids,
            "created_at": now,
            "updated_at": now,
        }
        result = await self.collection.insert_one(doc)
        doc["_id"] = str(result.inserted_id)
        return doc

    async def list_for_member(self, user_id: str) -> List[Dict[str, Any]]:
        return await self._find({"member_ids": user_id}, sort=[("updated_at", DESCENDING)])

    async def touch(self, group_id: str) -> None:
        oid = to_object_id(group_id)
        if oid is None:
            return
        await self.collection.update_one({"_id": oid}, {"$set": {"updated_at": utcnow()}})

    async def remove_member_everywhere(self, user_id: str) -> int:
        result = await self.collection.update_many({"member_ids": user_id}, {"$pull": {"member_ids": user_id}})
        return result.modified_count or 0
