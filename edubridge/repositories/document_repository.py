from typing import Any, Dict, List, Optional

from pymongo import DESCENDING

from edubridge.models.document import DocumentDocument
from edubridge.repositories.base import BaseRepository
from edubridge.utils.dates import utcnow


class DocumentRepository(BaseRepository):

    collection_name = "documents"

    async def create_document(
        self,
        name: str,
        url: str,
        content_type: Optional[str],
        size: int,
        user_id: str,
        enrollment_id: Optional[str] = None,
    ) -> Dict[str, Any]:
        doc: DocumentDocument = {
            "name": name,
            "url": url,
            "type": content_type,
            "size": size,
            "user_id": user_id,
            "enrollment_id": enrollment_id,
            "uploaded_at": utcnow(),
        }
        result = await self.collection.insert_one(doc)
        doc["_id"] = str(result.inserted_id)
        return doc

    async def list_by_user(self, user_id: str) -> List[Dict[str, Any]]:
        return await self._find({"user_id": user_id}, sort=[("uploaded_at", DESCENDING)])

    async def list_by_enrollment(self, enrollment_id: str) -> List[Dict[str, Any]]:
        return await self._find({"enrollment_id": enrollment_id}, sort=[("uploaded_at", DESCENDING)])

    async def delete_for_user(self, user_id: str) -> int:
        result = await self.collection.delete_many({"user_id": user_id})
        return result.deleted_count
