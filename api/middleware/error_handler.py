# api/middleware/error_handler.py
"""
Centralized error handling: every failure leaves the API as a JSON object with an "error" field
"""
import logging
from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from typing import Any, Dict, Iterable, Optional

from core.errors import RxLensError
from utils.logging_filters import redact_secrets

logger = logging.getLogger(__name__)


def error_response(status_code: int, message: str, details: Optional[Any] = None,
                   headers: Optional[Dict[str, str]] = None) -> JSONResponse:
    content: Dict[str, Any] = {"error": message}
    if details is not None:
        content["details"] = details
    return JSONResponse(status_code=status_code, content=content, headers=headers)


def _scrub(value: Any, secrets) -> Any:
    if isinstance(value, str):
        return redact_secrets(value, secrets)
    if isinstance(value, dict):
        return {k: _scrub(v, secrets) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_scrub(v, secrets) for v in value]
    return value


class ErrorHandlerMiddleware:
    """Converts domain and unexpected exceptions into JSON error responses"""

    def __init__(self, debug: bool = False, secrets: Iterable[str] = ()):
        self.debug = debug
        self.secrets = tuple(s for s in secrets if s)
        self.error_count = 0
        self.error_types = {}

    async def __call__(self, request: Request, call_next):
        try:
            return await call_next(request)

        except RxLensError as e:
            log = logger.warning if e.status_code < 500 else logger.error
            log(f"{e.error_code} on {request.url.path}: {e.message}")
            self._track_error(e.error_code)
            return self._response(e.status_code, e.message, e.details)

        except Exception as e:
            logger.exception(f"Unexpected error processing {request.url.path}")
            self._track_error("unexpected_error")
            # Internal details only leave the process in debug mode
            return self._response(
                500,
                "Internal server error",
                f"{type(e).__name__}: {e}" if self.debug else None,
            )

    async def http_exception_handler(self, request: Request, exc: StarletteHTTPException):
        """405s, multipart parse failures and other framework errors, message passed through"""
        self._track_error(f"http_{exc.status_code}")
        return self._response(exc.status_code, str(exc.detail), headers=getattr(exc, "headers", None))

    async def validation_exception_handler(self, request: Request, exc: RequestValidationError):
        logger.warning(f"Validation error for {request.url.path}: {exc.errors()}")
        self._track_error("validation_error")
        details = [
            {"loc": list(err.get("loc", ())), "msg": err.get("msg", "")}
            for err in exc.errors()
        ]
        return self._response(400, "Invalid request body", details)

    def _response(self, status_code: int, message: str, details: Optional[Any] = None,
                  headers: Optional[Dict[str, str]] = None) -> JSONResponse:
        """error_response with configured secrets scrubbed from message and details"""
        if self.secrets:
            message = redact_secrets(message, self.secrets)
            if details is not None:
                details = _scrub(details, self.secrets)
        return error_response(status_code, message, details, headers=headers)

    def _track_error(self, error_type: str):
        """Track error statistics"""
        self.error_count += 1
        self.error_types[error_type] = self.error_types.get(error_type, 0) + 1

    def get_error_stats(self) -> Dict[str, Any]:
        """Get error statistics"""
        return {
            "total_errors": self.error_count,
            "error_types": dict(self.error_types),
        }
