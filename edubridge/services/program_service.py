import logging
from typing import List, Optional

from edubridge.repositories.program_repository import ProgramRepository
from edubridge.schemas.program import ProgramCreate, ProgramOut, ProgramUpdate
from edubridge.utils.dates import to_naive_utc
from edubridge.utils.errors import NotFoundError, ValidationError


logger = logging.getLogger(__name__)


class ProgramService:

    def __init__(self, program_repo: ProgramRepository) -> None:
        self._program_repo = program_repo

    async def create_program(self, data: ProgramCreate, created_by_id: str) -> ProgramOut:
        fields = data.model_dump()
        for key in ("start_date", "end_date"):
            if fields.get(key):
                fields[key] = to_naive_utc(fields[key])
        program = await self._program_repo.create_program(fields, created_by_id)
        logger.info("Program %s created by %s", program["_id"], created_by_id)
        return ProgramOut.from_doc(program)

    async def list_programs(self, created_by_id: Optional[str] = None) -> List[ProgramOut]:
        programs = await self._program_repo.list_programs(created_by_id)
        return [ProgramOut.from_doc(p) for p in programs]

    async def get_program(self, program_id: str) -> ProgramOut:
        program = await self._program_repo.get_by_id(program_id)
        if not program:
            raise NotFoundError("Program not found")
        return ProgramOut.from_doc(program)

    async def update_program(self, program_id: str, data: ProgramUpdate) -> ProgramOut:
        program = await self._program_repo.get_by_id(program_id)
        if not program:
            raise NotFoundError("Program not found")
        fields = data.model_dump(exclude_none=True)
        for key in ("start_date", "end_date"):
            if fields.get(key):
                fields[key] = to_naive_utc(fields[key])
        if "capacity" in fields and fields["capacity"] < program.get("seats_taken", 0):
            raise ValidationError("Capacity cannot be lower than the number of current enrollments")
        start = fields.get("start_date", program.get("start_date"))
        end = fields.get("end_date", program.get("end_date"))
        if start and end and end < start:
            raise ValidationError("End date must be after start date")
        updated = await self._program_repo.update_program(program_id, fields)
        return ProgramOut.from_doc(updated)

    async def delete_program(self, program_id: str) -> None:
        if not await self._program_repo.delete_by_id(program_id):
            raise NotFoundError("Program not found")
        logger.info("Program %s deleted", program_id)
