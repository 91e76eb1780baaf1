"""Seed a development database: `python -m edubridge.seed`."""
import asyncio
import logging
from datetime import datetime

from edubridge.database.connection import close_mongo_connection, connect_to_mongo, get_database
from edubridge.database.indexes import ensure_indexes
from edubridge.repositories.enrollment_repository import EnrollmentRepository
from edubridge.repositories.program_repository import ProgramRepository
from edubridge.services.user_service import UserService


logger = logging.getLogger(__name__)


SAMPLE_PROGRAMS = [
    {
        "name": "STEM Preparation",
        "description": "Prepare students for success in Science, Technology, Engineering, and Mathematics fields.",
        "duration": 12,
        "start_date": datetime(2023, 6, 15),
        "end_date": datetime(2023, 9, 7),
        "capacity": 50,
        "status": "ACTIVE",
    },
    {
        "name": "Language Proficiency",
        "description": "Enhance language skills for academic success and professional development.",
        "duration": 8,
        "start_date": datetime(2023, 7, 1),
        "end_date": datetime(2023, 8, 26),
        "capacity": 40,
        "status": "ACTIVE",
    },
    {
        "name": "Career Transition",
        "description": "Support students transitioning between different career paths with specialized training.",
        "duration": 16,
        "start_date": datetime(2023, 8, 5),
        "end_date": datetime(2023, 11, 25),
        "capacity": 35,
        "status": "UPCOMING",
    },
]


async def seed(db) -> dict:
    users = UserService(db)
    admin = await users.get_or_create_user("admin@edubridge.com", "admin123", "Admin User", "123-456-7890", "ADMIN")
    student = await users.get_or_create_user("student@example.com", "student123", "John Smith", "987-654-3210", "STUDENT")

    program_repo = ProgramRepository(db)
    programs = {}
    for data in SAMPLE_PROGRAMS:
        existing = await program_repo.collection.find_one({"name": data["name"]})
        if existing:
            programs[data["name"]] = str(existing["_id"])
        else:
            programs[data["name"]] = (await program_repo.create_program(data, admin.id))["_id"]

    enrollment_repo = EnrollmentRepository(db)
    stem_id = programs["STEM Preparation"]
    enrollment = await enrollment_repo.get_for_user_and_program(student.id, stem_id)
    if not enrollment:
        await program_repo.claim_seat(stem_id, SAMPLE_PROGRAMS[0]["capacity"])
        enrollment = await enrollment_repo.create_enrollment(
            student.id, stem_id, message="Excited to join this program!", status="APPROVED"
        )
    return {"admin": admin.id, "student": student.id, "programs": programs, "enrollment": enrollment["_id"]}


async def main() -> None:
    await connect_to_mongo()
    try:
        db = get_database()
        await ensure_indexes(db)
        result = await seed(db)
        logger.info("Seeded: %s", result)
    finally:
        await close_mongo_connection()


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    asyncio.run(main())
