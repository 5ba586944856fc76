# bto/core/errors.py
"""
Typed failures for the housing core.

Every rule violation detected by a service is raised as one of four kinds.
Callers branch on ``kind`` (or the concrete class) instead of parsing messages:

    DomainError (ValueError)
    +-- ValidationError   ineligible unit type, malformed input, wrong role
    +-- NotFoundError     unknown person, project, application, booking, ...
    +-- ConflictError     active application exists, no units/slots left, already booked
    +-- StateError        status does not permit the operation

Storage failures (sqlalchemy.exc.SQLAlchemyError) are not wrapped.
"""
from __future__ import annotations

from enum import Enum
from typing import Any, Dict, Optional


class ErrorKind(str, Enum):
    VALIDATION = "VALIDATION"
    NOT_FOUND = "NOT_FOUND"
    CONFLICT = "CONFLICT"
    STATE = "STATE"


class DomainError(ValueError):
    kind: ErrorKind = ErrorKind.VALIDATION
    code: str = "DOMAIN_ERROR"

    def __init__(self, message: str, *, code: Optional[str] = None, **details: Any):
        super().__init__(message)
        self.message = message
        if code:
            self.code = code
        self.details: Dict[str, Any] = details

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind.value,
            "code": self.code,
            "message": self.message,
            "details": self.details,
        }


class ValidationError(DomainError):
    kind = ErrorKind.VALIDATION
    code = "VALIDATION_FAILED"


class NotFoundError(DomainError):
    kind = ErrorKind.NOT_FOUND
    code = "NOT_FOUND"


class ConflictError(DomainError):
    kind = ErrorKind.CONFLICT
    code = "CONFLICT"


class StateError(DomainError):
    kind = ErrorKind.STATE
    code = "INVALID_STATE"
