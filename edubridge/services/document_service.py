import logging
from typing import List, Optional

from edubridge.repositories.document_repository import DocumentRepository
from edubridge.repositories.enrollment_repository import EnrollmentRepository
from edubridge.schemas.document import DocumentOut
from edubridge.utils.errors import NotFoundError, ValidationError


logger = logging.getLogger(__name__)

PLACEHOLDER_BASE_URL = "https://example.com/files/"


class DocumentService:
    """Keeps document metadata only; file bytes are not stored anywhere."""

    def __init__(self, document_repo: DocumentRepository, enrollment_repo: EnrollmentRepository) -> None:
        self._document_repo = document_repo
        self._enrollment_repo = enrollment_repo

    async def upload(
        self,
        user_id: str,
        filename: Optional[str],
        content_type: Optional[str],
        size: int,
        enrollment_id: Optional[str] = None,
    ) -> DocumentOut:
        if not filename:
            raise ValidationError("A file is required")
        if enrollment_id and not await self._enrollment_repo.get_by_id(enrollment_id):
            raise NotFoundError("Enrollment not found")
        document = await self._document_repo.create_document(
            name=filename,
            url=f"{PLACEHOLDER_BASE_URL}{filename}",
            content_type=content_type,
            size=size,
            user_id=user_id,
            enrollment_id=enrollment_id,
        )
        logger.info("Recorded document %s (%d bytes) for user %s", filename, size, user_id)
        return DocumentOut.from_doc(document)

    async def list_by_user(self, user_id: str) -> List[DocumentOut]:
        return [DocumentOut.from_doc(d) for d in await self._document_repo.list_by_user(user_id)]

    async def list_by_enrollment(self, enrollment_id: str) -> List[DocumentOut]:
        return [DocumentOut.from_doc(d) for d in await self._document_repo.list_by_enrollment(enrollment_id)]

    async def get(self, document_id: str) -> DocumentOut:
        document = await self._document_repo.get_by_id(document_id)
        if not document:
            raise NotFoundError("Document not found")
        return DocumentOut.from_doc(document)

    async def delete(self, document_id: str) -> None:
        if not await self._document_repo.delete_by_id(document_id):
            raise NotFoundError("Document not found")
