from datetime import datetime

import pytest

from edubridge.repositories.program_repository import ProgramRepository
from edubridge.schemas.program import ProgramCreate, ProgramUpdate
from edubridge.services.program_service import ProgramService
from edubridge.utils.errors import NotFoundError, ValidationError


@pytest.fixture
def repo(db):
    return ProgramRepository(db)


@pytest.fixture
def service(repo):
    return ProgramService(repo)


def new_program(**overrides):
    data = {
        "name": "Geography",
        "description": "Maps, climates and landforms",
        "duration": 8,
        "capacity": 3,
        "start_date": datetime(2024, 9, 1),
        "end_date": datetime(2024, 11, 1),
    }
    data.update(overrides)
    return ProgramCreate(**data)


async def test_create_defaults_to_upcoming(service):
    program = await service.create_program(new_program(), "staff-1")

    assert program.status == "UPCOMING"
    assert program.seats_taken == 0
    assert program.created_by_id == "staff-1"
    assert [p.id for p in await service.list_programs(created_by_id="staff-1")] == [program.id]
    assert await service.list_programs(created_by_id="someone-else") == []


async def test_capacity_cannot_drop_below_taken_seats(repo, service):
    program = await service.create_program(new_program(capacity=3), "staff-1")
    await repo.claim_seat(program.id, 3)
    await repo.claim_seat(program.id, 3)

    with pytest.raises(ValidationError, match="Capacity"):
        await service.update_program(program.id, ProgramUpdate(capacity=1))

    updated = await service.update_program(program.id, ProgramUpdate(capacity=2, status="ACTIVE"))
    assert (updated.capacity, updated.status) == (2, "ACTIVE")


async def test_end_date_must_follow_start_date(service):
    program = await service.create_program(new_program(), "staff-1")

    with pytest.raises(ValidationError, match="End date"):
        await service.update_program(program.id, ProgramUpdate(end_date=datetime(2024, 8, 1)))

    with pytest.raises(ValueError):
        new_program(start_date=datetime(2024, 9, 1), end_date=datetime(2024, 8, 1))


async def test_delete_program(service):
    program = await service.create_program(new_program(), "staff-1")

    await service.delete_program(program.id)

    with pytest.raises(NotFoundError):
        await service.get_program(program.id)
    with pytest.raises(NotFoundError):
        await service.delete_program(program.id)
