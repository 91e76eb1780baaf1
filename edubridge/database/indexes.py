from motor.motor_asyncio import AsyncIOMotorDatabase

from edubridge.repositories.announcement_repository import AnnouncementRepository
from edubridge.repositories.assignment_repository import AssignmentRepository
from edubridge.repositories.attendance_repository import AttendanceRepository
from edubridge.repositories.chat_repository import ChatRepository
from edubridge.repositories.enrollment_repository import EnrollmentRepository
from edubridge.repositories.message_repository import MessageGroupRepository, MessageRepository
from edubridge.repositories.user_repository import UserRepository


async def ensure_indexes(db: AsyncIOMotorDatabase) -> None:
    await UserRepository(db).ensure_indexes()
    await EnrollmentRepository(db).ensure_indexes()
    await AssignmentRepository(db).ensure_indexes()
    await AttendanceRepository(db).ensure_indexes()
    await AnnouncementRepository(db).ensure_indexes()
    await MessageRepository(db).ensure_indexes()
    await MessageGroupRepository(db).ensure_indexes()
    await ChatRepository(db).ensure_indexes()
