from typing import List, Optional

from edubridge.repositories.announcement_repository import AnnouncementRepository
from edubridge.repositories.enrollment_repository import ACTIVE_STATUSES, EnrollmentRepository
from edubridge.repositories.program_repository import ProgramRepository
from edubridge.repositories.user_repository import UserRepository
from edubridge.schemas.announcement import (
    AnnouncementCommentCreate,
    AnnouncementCommentOut,
    AnnouncementCreate,
    AnnouncementDetail,
    AnnouncementOut,
)
from edubridge.schemas.common import ProgramSummary, UserSummary
from edubridge.utils.errors import NotFoundError
from edubridge.utils.realtime_bus import notify_users


class AnnouncementService:

    def __init__(self, db) -> None:
        self._announcement_repo = AnnouncementRepository(db)
        self._enrollment_repo = EnrollmentRepository(db)
        self._program_repo = ProgramRepository(db)
        self._user_repo = UserRepository(db)

    async def create(self, data: AnnouncementCreate, created_by_id: str) -> AnnouncementOut:
        if not await self._program_repo.get_by_id(data.program_id):
            raise NotFoundError("Program not found")
        announcement = await self._announcement_repo.create_announcement(
            data.title, data.content, data.program_id, created_by_id
        )
        enrolled = await self._enrollment_repo.list_by_program(data.program_id, statuses=list(ACTIVE_STATUSES))
        await notify_users(
            [e["user_id"] for e in enrolled],
            "announcement",
            {"announcement_id": announcement["_id"], "program_id": data.program_id, "title": data.title},
            exclude=created_by_id,
        )
        return AnnouncementOut.from_doc(announcement)

    async def list_by_program(self, program_id: str) -> List[AnnouncementOut]:
        return await self._decorate(await self._announcement_repo.list_by_programs([program_id]))

    async def list_for_student(self, user_id: str) -> List[AnnouncementOut]:
        enrollments = await self._enrollment_repo.list_by_user(user_id, statuses=list(ACTIVE_STATUSES))
        program_ids = [e["program_id"] for e in enrollments]
        if not program_ids:
            return []
        return await self._decorate(await self._announcement_repo.list_by_programs(program_ids))

    async def get(self, announcement_id: str) -> AnnouncementDetail:
        announcement = await self._announcement_repo.get_by_id(announcement_id)
        if not announcement:
            raise NotFoundError("Announcement not found")
        comments = await self._announcement_repo.list_comments(announcement_id)
        profiles = await self._user_repo.get_profiles(
            [announcement["created_by_id"]] + [c["user_id"] for c in comments]
        )
        program = await self._program_repo.get_by_id(announcement["program_id"])
        return AnnouncementDetail.from_doc(
            announcement,
            created_by=_summary(profiles.get(announcement["created_by_id"])),
            program=ProgramSummary(id=program["_id"], name=program["name"]) if program else None,
            comment_count=len(comments),
            comments=[AnnouncementCommentOut.from_doc(c, user=_summary(profiles.get(c["user_id"]))) for c in comments],
        )

    async def add_comment(self, announcement_id: str, data: AnnouncementCommentCreate, user_id: str) -> AnnouncementCommentOut:
        if not await self._announcement_repo.get_by_id(announcement_id):
            raise NotFoundError("Announcement not found")
        comment = await self._announcement_repo.add_comment(data.content, user_id, announcement_id)
        return AnnouncementCommentOut.from_doc(comment)

    async def _decorate(self, announcements) -> List[AnnouncementOut]:
        ids = [a["_id"] for a in announcements]
        counts = await self._announcement_repo.count_comments(ids)
        profiles = await self._user_repo.get_profiles([a["created_by_id"] for a in announcements])
        programs = await self._program_repo.list_by_ids([a["program_id"] for a in announcements])
        result = []
        for a in announcements:
            program = programs.get(a["program_id"])
            result.append(AnnouncementOut.from_doc(
                a,
                comment_count=counts.get(a["_id"], 0),
                created_by=_summary(profiles.get(a["created_by_id"])),
                program=ProgramSummary(id=program["_id"], name=program["name"]) if program else None,
            ))
        return result


def _summary(profile: Optional[dict]) -> Optional[UserSummary]:
    return UserSummary(**profile) if profile else None
