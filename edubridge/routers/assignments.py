from typing import List

from fastapi import APIRouter, Depends, status

from edubridge.database.connection import mongo_db_dependency
from edubridge.schemas.assignment import (
    AssignmentCreate,
    AssignmentDetail,
    AssignmentOut,
    CommentCreate,
    CommentOut,
    GradeRequest,
    StudentAssignment,
    SubmissionCreate,
    SubmissionOut,
)
from edubridge.services.assignment_service import AssignmentService
from edubridge.utils.dependencies import get_current_user, require_staff


router = APIRouter(prefix="/assignments", tags=["assignments"])


def get_assignment_service(db=Depends(mongo_db_dependency)) -> AssignmentService:
    return AssignmentService(db)


@router.post("", response_model=AssignmentOut, status_code=status.HTTP_201_CREATED)
async def create_assignment(payload: AssignmentCreate, current_user: dict = Depends(require_staff), service: AssignmentService = Depends(get_assignment_service)):
    return await service.create_assignment(payload, current_user["_id"])


@router.get("/me", response_model=List[StudentAssignment])
async def my_assignments(current_user: dict = Depends(get_current_user), service: AssignmentService = Depends(get_assignment_service)):
    return await service.list_for_student(current_user["_id"])


@router.get("/program/{program_id}", response_model=List[AssignmentOut])
async def program_assignments(program_id: str, current_user: dict = Depends(get_current_user), service: AssignmentService = Depends(get_assignment_service)):
    return await service.list_by_program(program_id)


@router.post("/comments", response_model=CommentOut, status_code=status.HTTP_201_CREATED)
async def add_comment(payload: CommentCreate, current_user: dict = Depends(get_current_user), service: AssignmentService = Depends(get_assignment_service)):
    return await service.add_comment(payload, current_user["_id"])


@router.post("/submissions/{submission_id}/grade", response_model=SubmissionOut)
async def grade_submission(submission_id: str, payload: GradeRequest, current_user: dict = Depends(require_staff), service: AssignmentService = Depends(get_assignment_service)):
    return await service.grade(submission_id, payload)


@router.get("/{assignment_id}", response_model=AssignmentDetail)
async def get_assignment(assignment_id: str, current_user: dict = Depends(get_current_user), service: AssignmentService = Depends(get_assignment_service)):
    return await service.get_assignment(assignment_id)


@router.post("/{assignment_id}/submissions", response_model=SubmissionOut)
async def submit_assignment(assignment_id: str, payload: SubmissionCreate, current_user: dict = Depends(get_current_user), service: AssignmentService = Depends(get_assignment_service)):
    return await service.submit(assignment_id, payload, current_user["_id"])
