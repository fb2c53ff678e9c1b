"""Maps workflow errors onto HTTP responses."""

from __future__ import annotations

import logging
from typing import Dict, Type

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from nodex.common.errors import (
    ApplicationClosedError,
    ApplicationNotFoundError,
    ConcurrentModificationError,
    DuplicateApplicationError,
    DuplicateRecordError,
    ForbiddenError,
    InvalidFacultyError,
    InvalidRoleError,
    InvalidSubjectError,
    NodexError,
    NotProfileCompletedError,
    PrecondOrderingError,
    StorageTimeoutError,
    StoreError,
    ValidationError,
)

logger = logging.getLogger("errors")

STATUS_BY_ERROR: Dict[Type[NodexError], int] = {
    ValidationError: status.HTTP_400_BAD_REQUEST,
    InvalidSubjectError: status.HTTP_400_BAD_REQUEST,
    InvalidFacultyError: status.HTTP_400_BAD_REQUEST,
    NotProfileCompletedError: status.HTTP_400_BAD_REQUEST,
    InvalidRoleError: status.HTTP_400_BAD_REQUEST,
    ForbiddenError: status.HTTP_403_FORBIDDEN,
    ApplicationNotFoundError: status.HTTP_404_NOT_FOUND,
    DuplicateApplicationError: status.HTTP_409_CONFLICT,
    DuplicateRecordError: status.HTTP_409_CONFLICT,
    ConcurrentModificationError: status.HTTP_409_CONFLICT,
    ApplicationClosedError: status.HTTP_409_CONFLICT,
    PrecondOrderingError: status.HTTP_409_CONFLICT,
    StorageTimeoutError: status.HTTP_504_GATEWAY_TIMEOUT,
    StoreError: status.HTTP_502_BAD_GATEWAY,
}


def status_for(exc: NodexError) -> int:
    for klass in type(exc).__mro__:
        code = STATUS_BY_ERROR.get(klass)  # type: ignore[arg-type]
        if code is not None:
            return code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


def setup_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(NodexError)
    async def nodex_exception_handler(request: Request, exc: NodexError):
        code = status_for(exc)
        request_id = getattr(request.state, "request_id", None)
        if code >= 500:
            logger.error("%s on %s: %s (request_id=%s)", exc.error_code, request.url.path, exc.message, request_id)
        else:
            logger.info("%s on %s: %s", exc.error_code, request.url.path, exc.message)
        return JSONResponse(
            status_code=code,
            content={
                "detail": exc.message,
                "error_code": exc.error_code,
            },
        )
