from typing import List

from fastapi import APIRouter, Depends, status

from edubridge.database.connection import mongo_db_dependency
from edubridge.repositories.program_repository import ProgramRepository
from edubridge.schemas.common import StatusMessage
from edubridge.schemas.program import ProgramCreate, ProgramOut, ProgramUpdate
from edubridge.services.program_service import ProgramService
from edubridge.utils.dependencies import get_current_user, require_staff


router = APIRouter(prefix="/programs", tags=["programs"])


def get_program_service(db=Depends(mongo_db_dependency)) -> ProgramService:
    return ProgramService(ProgramRepository(db))


@router.post("", response_model=ProgramOut, status_code=status.HTTP_201_CREATED)
async def create_program(payload: ProgramCreate, current_user: dict = Depends(require_staff), service: ProgramService = Depends(get_program_service)):
    return await service.create_program(payload, current_user["_id"])


@router.get("", response_model=List[ProgramOut])
async def list_programs(current_user: dict = Depends(get_current_user), service: ProgramService = Depends(get_program_service)):
    return await service.list_programs()


@router.get("/mine", response_model=List[ProgramOut])
async def my_programs(current_user: dict = Depends(require_staff), service: ProgramService = Depends(get_program_service)):
    return await service.list_programs(created_by_id=current_user["_id"])


@router.get("/{program_id}", response_model=ProgramOut)
async def get_program(program_id: str, current_user: dict = Depends(get_current_user), service: ProgramService = Depends(get_program_service)):
    return await service.get_program(program_id)


@router.put("/{program_id}", response_model=ProgramOut)
async def update_program(program_id: str, payload: ProgramUpdate, current_user: dict = Depends(require_staff), service: ProgramService = Depends(get_program_service)):
    return await service.update_program(program_id, payload)


@router.delete("/{program_id}", response_model=StatusMessage)
async def delete_program(program_id: str, current_user: dict = Depends(require_staff), service: ProgramService = Depends(get_program_service)):
    await service.delete_program(program_id)
    return StatusMessage()
