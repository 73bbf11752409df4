from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from typing import Any, Optional
import structlog

logger = structlog.get_logger(__name__)


class InterviewAssistantError(Exception):
    """Base class for every error raised by the interview assistant."""
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class UnsupportedFormat(InterviewAssistantError):
    """Uploaded file is not a PDF or DOCX document."""
    status_code = status.HTTP_415_UNSUPPORTED_MEDIA_TYPE


class ParseFailure(InterviewAssistantError):
    """Document could not be decoded (corrupt, encrypted, truncated)."""
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY


class AuthError(InterviewAssistantError):
    """No usable credential for the completion service."""
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE


class ServiceError(InterviewAssistantError):
    """Completion service call failed or returned malformed data."""
    status_code = status.HTTP_502_BAD_GATEWAY

    def __init__(self, message: str, http_status: Optional[int] = None, body: Any = None):
        super().__init__(message)
        self.http_status = http_status
        self.body = body


class InterviewStateError(InterviewAssistantError):
    """Operation is not valid for the current interview state."""
    status_code = status.HTTP_409_CONFLICT


class CandidateNotFound(InterviewAssistantError):
    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, candidate_id: str):
        super().__init__(f"Candidate {candidate_id} not found")
        self.candidate_id = candidate_id


async def handle_interview_error(request: Request, exc: InterviewAssistantError) -> JSONResponse:
    logger.warning(
        "request_failed",
        path=request.url.path,
        error=type(exc).__name__,
        detail=exc.message,
    )
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message, "error": type(exc).__name__},
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(InterviewAssistantError, handle_interview_error)
