# bto/api/errors.py
from __future__ import annotations

import logging

from fastapi import HTTPException

from bto.core.errors import DomainError, ErrorKind

logger = logging.getLogger(__name__)

STATUS_FOR_KIND = {
    ErrorKind.VALIDATION: 400,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.CONFLICT: 409,
    ErrorKind.STATE: 409,
}


def http_error(e: DomainError) -> HTTPException:
    status = STATUS_FOR_KIND.get(e.kind, 400)
    logger.warning(
        "operation rejected",
        extra={"kind": e.kind.value, "code": e.code, "status_code": status},
    )
    return HTTPException(status_code=status, detail=e.to_dict())
