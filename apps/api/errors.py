"""
Mapping from the error taxonomy to HTTP responses.
Routes stay thin: they let FrontDeskError subclasses propagate and the
handler registered here turns them into JSON errors.
"""
from typing import Any, Dict, List, Tuple, Type

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from core.errors import (
    AssignmentConflictError,
    CollaboratorUnavailableError,
    DuplicateSlotError,
    FrontDeskError,
    RecordNotFoundError,
    SettingsValidationError,
)


STATUS_NOT_FOUND = 404
STATUS_CONFLICT = 409
STATUS_UNPROCESSABLE = 422
STATUS_SERVICE_UNAVAILABLE = 503  # store down; client may retry
STATUS_INTERNAL_ERROR = 500

# First match wins.
ERROR_STATUS_RULES: List[Tuple[Type[FrontDeskError], int, str]] = [
    (DuplicateSlotError, STATUS_CONFLICT, "duplicate_slot"),
    (AssignmentConflictError, STATUS_CONFLICT, "assignment_conflict"),
    (SettingsValidationError, STATUS_UNPROCESSABLE, "validation_error"),
    (RecordNotFoundError, STATUS_NOT_FOUND, "not_found"),
    (CollaboratorUnavailableError, STATUS_SERVICE_UNAVAILABLE, "collaborator_unavailable"),
]


def error_body(exc: FrontDeskError) -> Tuple[int, Dict[str, Any]]:
    """Status code and JSON body for a taxonomy error."""
    for error_type, status_code, code in ERROR_STATUS_RULES:
        if isinstance(exc, error_type):
            break
    else:
        status_code, code = STATUS_INTERNAL_ERROR, "internal_error"

    body: Dict[str, Any] = {"error": code, "detail": str(exc)}
    if isinstance(exc, SettingsValidationError):
        body["issues"] = exc.issues
    elif isinstance(exc, DuplicateSlotError):
        body["slot"] = {
            "weekday": exc.weekday,
            "start_time": exc.start_time.strftime("%H:%M"),
            "end_time": exc.end_time.strftime("%H:%M"),
        }
    elif isinstance(exc, CollaboratorUnavailableError):
        body["retryable"] = True
    return status_code, body


async def front_desk_error_handler(request: Request, exc: FrontDeskError) -> JSONResponse:
    status_code, body = error_body(exc)
    return JSONResponse(status_code=status_code, content=body)


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(FrontDeskError, front_desk_error_handler)
