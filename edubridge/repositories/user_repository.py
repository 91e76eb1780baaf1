import re
from typing import Any, Dict, List, Optional

from pymongo import ASCENDING, DESCENDING

from edubridge.models.user import UserDocument
from edubridge.repositories.base import BaseRepository, normalize, to_object_id, to_object_ids
from edubridge.utils.dates import utcnow


PUBLIC_PROJECTION = {"hashed_password": 0}


class UserRepository(BaseRepository):

    collection_name = "users"

    async def ensure_indexes(self) -> None:
        await self.collection.create_index([("email", ASCENDING)], unique=True)
        await self.collection.create_index([("role", ASCENDING)])

    async def create_user(
        self,
        email: str,
        hashed_password: str,
        name: str,
        phone: Optional[str] = None,
        role: str = "STUDENT",
    ) -> Dict[str, Any]:
        now = utcnow()
        doc: UserDocument = {
            "email": email,
            "hashed_password": hashed_password,
            "name": name,
            "phone": phone,
            "role": role,
            "image": None,
            "created_at": now,
            "updated_at": now,
        }
        result = await self.collection.insert_one(doc)
        doc["_id"] = str(result.inserted_id)
        return doc

    async def get_user_by_email(self, email: str) -> Optional[dict]:
        return normalize(await self.collection.find_one({"email": email}))

    async def get_profiles(self, user_ids: List[str]) -> Dict[str, Dict[str, Any]]:
        """Public id/name/image/role for each existing user id."""
        oids = to_object_ids(set(user_ids))
        if not oids:
            return {}
        cur = self.collection.find({"_id": {"$in": oids}}, {"name": 1, "image": 1, "email": 1, "role": 1})
        profiles = {}
        async for doc in cur:
            uid = str(doc["_id"])
            profiles[uid] = {
                "id": uid,
                "name": doc.get("name"),
                "email": doc.get("email"),
                "image": doc.get("image"),
                "role": doc.get("role"),
            }
        return profiles

    async def list_users(self, role: Optional[str] = None, search: Optional[str] = None) -> List[Dict[str, Any]]:
        query: Dict[str, Any] = {}
        if role:
            query["role"] = role
        if search:
            pattern = re.compile(re.escape(search), re.IGNORECASE)
            ors: List[Dict[str, Any]] = [{"name": pattern}, {"email": pattern}]
            oid = to_object_id(search)
            if oid is not None:
                ors.append({"_id": oid})
            query["$or"] = ors
        cur = self.collection.find(query, PUBLIC_PROJECTION).sort("created_at", DESCENDING)
        items = await cur.to_list(length=None)
        for it in items:
            normalize(it)
        return items

    async def update_user(self, user_id: str, fields: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        oid = to_object_id(user_id)
        if oid is None:
            return None
        fields = dict(fields)
        fields["updated_at"] = utcnow()
        await self.collection.update_one({"_id": oid}, {"$set": fields})
        return await self.get_by_id(user_id)

    async def count(self, query: Dict[str, Any] | None = None) -> int:
        return await self.collection.count_documents(query or {})
