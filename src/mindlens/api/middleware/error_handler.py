"""
Error Handler Middleware

Consistent error responses with correlation IDs.

Domain errors map to status codes:
- MalformedInputError -> 422
- AuditWriteError, StorageUploadError, EncryptionError -> 503
- anything else -> 500

SAFETY: When a failed submission still required immediate action,
the 503 body carries the emergency resources so the client can show
them without waiting on a retry.
"""

import traceback
from typing import Optional
from uuid import uuid4

from fastapi import Request, Response
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from mindlens.config.logging_config import get_logger, bind_correlation_id, clear_context
from mindlens.domain.errors import (
    AuditWriteError,
    EncryptionError,
    MalformedInputError,
    MindLensError,
    StorageUploadError,
)

logger = get_logger(__name__)

UNAVAILABLE_ERRORS = (AuditWriteError, StorageUploadError, EncryptionError)


def resolve_country_code(request: Request, requested: Optional[str] = None) -> str:
    """
    Jurisdiction for crisis resources on this request.

    Order: explicit value, the value the endpoint recorded on
    request.state, the X-Country-Code header, the configured default.
    """
    return (
        requested
        or getattr(request.state, "country_code", None)
        or request.headers.get("X-Country-Code")
        or request.app.state.settings.default_country_code
    )


def _emergency_resources(request: Request, error: MindLensError) -> Optional[str]:
    check = error.safety_check
    if check is None or not check.requires_immediate_action:
        return None
    collaborators = getattr(request.app.state, "collaborators", None)
    if collaborators is None:
        return None
    return collaborators.resources.format_crisis_message(resolve_country_code(request))


class ErrorHandlerMiddleware(BaseHTTPMiddleware):
    """
    Global error handling middleware.

    Provides:
    - Correlation ID tracking for all requests
    - Domain error to status code mapping
    - Sanitized error bodies (no internals leaked)
    """

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        correlation_id = request.headers.get("X-Correlation-ID") or str(uuid4())
        bind_correlation_id(correlation_id)
        headers = {"X-Correlation-ID": correlation_id}

        try:
            response = await call_next(request)
            response.headers["X-Correlation-ID"] = correlation_id
            return response

        except MalformedInputError as e:
            logger.warning("Malformed assessment input", field=e.field, error=str(e))
            return JSONResponse(
                status_code=422,
                content={
                    "error": "Malformed input",
                    "field": e.field,
                    "message": str(e),
                    "correlation_id": correlation_id,
                },
                headers=headers,
            )

        except UNAVAILABLE_ERRORS as e:
            logger.error(
                "Submission failed",
                path=request.url.path,
                error_type=type(e).__name__,
                collaborator=e.collaborator,
                error_message=str(e),
            )
            check = e.safety_check
            content = {
                "error": "Service unavailable",
                "correlation_id": correlation_id,
                "message": "Your assessment could not be saved. Please try again.",
                "retryable": e.is_retryable,
            }
            if check is not None:
                content["requires_immediate_action"] = check.requires_immediate_action
                resources = _emergency_resources(request, e)
                if resources:
                    content["emergency_resources"] = resources
            return JSONResponse(status_code=503, content=content, headers=headers)

        except Exception as e:
            logger.error(
                "Unhandled exception",
                path=request.url.path,
                method=request.method,
                error_type=type(e).__name__,
                error_message=str(e),
                traceback=traceback.format_exc(),
            )
            return JSONResponse(
                status_code=500,
                content={
                    "error": "Internal server error",
                    "correlation_id": correlation_id,
                    "message": "An unexpected error occurred. Please try again.",
                },
                headers=headers,
            )

        finally:
            clear_context()
