from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict


class DocumentModel(BaseModel):
    """Response model built from a Mongo document whose `_id` is already a string."""

    model_config = ConfigDict(extra="ignore")

    id: str

    @classmethod
    def from_doc(cls, doc: Dict[str, Any], **extra: Any):
        data = {k: v for k, v in doc.items() if k != "_id"}
        data["id"] = doc["_id"]
        data.update(extra)
        return cls.model_validate(data)


class UserSummary(BaseModel):

    id: str
    name: Optional[str] = None
    email: Optional[str] = None
    image: Optional[str] = None
    role: Optional[str] = None


class ProgramSummary(BaseModel):

    id: str
    name: str


class StatusMessage(BaseModel):

    success: bool = True


class NamedValue(BaseModel):

    name: str
    value: int
