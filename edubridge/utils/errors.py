from enum import Enum


class ErrorKind(str, Enum):
    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    FORBIDDEN = "forbidden"
    UNAUTHORIZED = "unauthorized"
    INTERNAL = "internal"


HTTP_STATUS_BY_KIND = {
    ErrorKind.VALIDATION: 422,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.CONFLICT: 409,
    ErrorKind.FORBIDDEN: 403,
    ErrorKind.UNAUTHORIZED: 401,
    ErrorKind.INTERNAL: 500,
}


class ServiceError(Exception):
    """Base error raised by the service layer; `kind` decides the HTTP status."""

    kind: ErrorKind = ErrorKind.INTERNAL

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    @property
    def status_code(self) -> int:
        return HTTP_STATUS_BY_KIND[self.kind]

    def to_dict(self) -> dict:
        return {"error": self.message, "kind": self.kind.value}


class ValidationError(ServiceError):
    kind = ErrorKind.VALIDATION


class NotFoundError(ServiceError):
    kind = ErrorKind.NOT_FOUND


class ConflictError(ServiceError):
    kind = ErrorKind.CONFLICT


class ForbiddenError(ServiceError):
    kind = ErrorKind.FORBIDDEN


class UnauthorizedError(ServiceError):
    kind = ErrorKind.UNAUTHORIZED
