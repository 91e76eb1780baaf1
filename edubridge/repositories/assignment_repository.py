from typing import Any, Dict, List, Optional

from pymongo import ASCENDING, DESCENDING, ReturnDocument

from edubridge.models.assignment import AssignmentDocument, CommentDocument, SubmissionDocument
from edubridge.repositories.base import BaseRepository, normalize, to_object_id
from edubridge.utils.dates import utcnow


class AssignmentRepository(BaseRepository):

    collection_name = "assignments"

    @property
    def submissions(self):
        return self._db["submissions"]

    @property
    def comments(self):
        return self._db["comments"]

    async def ensure_indexes(self) -> None:
        await self.collection.create_index([("program_id", ASCENDING), ("due_date", ASCENDING)])
        await self.submissions.create_index([("assignment_id", ASCENDING), ("user_id", ASCENDING)], unique=True)
        await self.comments.create_index([("assignment_id", ASCENDING)])

    async def create_assignment(self, title: str, description: str, due_date, program_id: str, created_by_id: str) -> Dict[str, Any]:
        now = utcnow()
        doc: AssignmentDocument = {
            "title": title,
            "description": description,
            "due_date": due_date,
            "program_id": program_id,
            "created_by_id": created_by_id,
            "created_at": now,
            "updated_at": now,
        }
        result = await self.collection.insert_one(doc)
        doc["_id"] = str(result.inserted_id)
        return doc

    async def list_by_programs(self, program_ids: List[str]) -> List[Dict[str, Any]]:
        return await self._find({"program_id": {"$in": list(program_ids)}}, sort=[("due_date", ASCENDING)])

    async def count_submissions(self, assignment_ids: List[str]) -> Dict[str, int]:
        counts = {aid: 0 for aid in assignment_ids}
        cur = self.submissions.find({"assignment_id": {"$in": list(assignment_ids)}}, {"assignment_id": 1})
        async for doc in cur:
            counts[doc["assignment_id"]] = counts.get(doc["assignment_id"], 0) + 1
        return counts

    # submissions

    async def get_submission(self, submission_id: str) -> Optional[Dict[str, Any]]:
        oid = to_object_id(submission_id)
        if oid is None:
            return None
        return normalize(await self.submissions.find_one({"_id": oid}))

    async def list_submissions(self, assignment_id: str) -> List[Dict[str, Any]]:
        cur = self.submissions.find({"assignment_id": assignment_id}).sort("created_at", ASCENDING)
        items = await cur.to_list(length=None)
        return [normalize(it) for it in items]

    async def submissions_for_user(self, user_id: str, assignment_ids: List[str]) -> Dict[str, Dict[str, Any]]:
        cur = self.submissions.find({"user_id": user_id, "assignment_id": {"$in": list(assignment_ids)}})
        result = {}
        async for doc in cur:
            normalize(doc)
            result[doc["assignment_id"]] = doc
        return result

    async def upsert_submission(self, assignment_id: str, user_id: str, content: str, file_url: Optional[str]) -> SubmissionDocument:
        now = utcnow()
        doc = await self.submissions.find_one_and_update(
            {"assignment_id": assignment_id, "user_id": user_id},
            {
                "$set": {"content": content, "file_url": file_url, "status": "SUBMITTED", "updated_at": now},
                "$setOnInsert": {"grade": None, "feedback": None, "created_at": now},
            },
            upsert=True,
            return_document=ReturnDocument.AFTER,
        )
        return normalize(doc)

    async def grade_submission(self, submission_id: str, grade: int, feedback: Optional[str]) -> Optional[Dict[str, Any]]:
        oid = to_object_id(submission_id)
        if oid is None:
            return None
        doc = await self.submissions.find_one_and_update(
            {"_id": oid},
            {"$set": {"grade": grade, "feedback": feedback, "status": "GRADED", "updated_at": utcnow()}},
            return_document=ReturnDocument.AFTER,
        )
        return normalize(doc)

    async def delete_submissions_for_user(self, user_id: str) -> int:
        result = await self.submissions.delete_many({"user_id": user_id})
        return result.deleted_count

    # comments

    async def add_comment(self, content: str, user_id: str, assignment_id: Optional[str], submission_id: Optional[str]) -> Dict[str, Any]:
        doc: CommentDocument = {
            "content": content,
            "user_id": user_id,
            "assignment_id": assignment_id,
            "submission_id": submission_id,
            "created_at": utcnow(),
        }
        result = await self.comments.insert_one(doc)
        doc["_id"] = str(result.inserted_id)
        return doc

    async def list_comments(self, assignment_id: str) -> List[Dict[str, Any]]:
        cur = self.comments.find({"assignment_id": assignment_id}).sort("created_at", DESCENDING)
        items = await cur.to_list(length=None)
        return [normalize(it) for it in items]

    async def delete_comments_for_user(self, user_id: str) -> int:
        result = await self.comments.delete_many({"user_id": user_id})
        return result.deleted_count
