from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile, status

from edubridge.database.connection import mongo_db_dependency
from edubridge.repositories.document_repository import DocumentRepository
from edubridge.repositories.enrollment_repository import EnrollmentRepository
from edubridge.schemas.common import StatusMessage
from edubridge.schemas.document import DocumentOut
from edubridge.services.document_service import DocumentService
from edubridge.utils.dependencies import get_current_user, require_staff
from edubridge.utils.errors import ForbiddenError


router = APIRouter(prefix="/documents", tags=["documents"])


def get_document_service(db=Depends(mongo_db_dependency)) -> DocumentService:
    return DocumentService(DocumentRepository(db), EnrollmentRepository(db))


@router.post("", response_model=DocumentOut, status_code=status.HTTP_201_CREATED)
async def upload_document(
    file: UploadFile = File(...),
    enrollment_id: Optional[str] = Form(None),
    current_user: dict = Depends(get_current_user),
    service: DocumentService = Depends(get_document_service),
):
    data = await file.read()
    return await service.upload(current_user["_id"], file.filename, file.content_type, len(data), enrollment_id)


@router.get("/me", response_model=List[DocumentOut])
async def my_documents(current_user: dict = Depends(get_current_user), service: DocumentService = Depends(get_document_service)):
    return await service.list_by_user(current_user["_id"])


@router.get("/user/{user_id}", response_model=List[DocumentOut])
async def user_documents(user_id: str, current_user: dict = Depends(require_staff), service: DocumentService = Depends(get_document_service)):
    return await service.list_by_user(user_id)


@router.get("/enrollment/{enrollment_id}", response_model=List[DocumentOut])
async def enrollment_documents(enrollment_id: str, current_user: dict = Depends(require_staff), service: DocumentService = Depends(get_document_service)):
    return await service.list_by_enrollment(enrollment_id)


@router.delete("/{document_id}", response_model=StatusMessage)
async def delete_document(document_id: str, current_user: dict = Depends(get_current_user), service: DocumentService = Depends(get_document_service)):
    document = await service.get(document_id)
    if document.user_id != current_user["_id"] and current_user.get("role") not in ("ADMIN", "STAFF"):
        raise ForbiddenError("You can only delete your own documents")
    await service.delete(document_id)
    return StatusMessage()
