# api/middleware/__init__.py
"""
Middleware package for the RxLens API
"""
from .error_handler import ErrorHandlerMiddleware, error_response
from .request_logger import RequestLoggerMiddleware

__all__ = [
    "ErrorHandlerMiddleware",
    "RequestLoggerMiddleware",
    "error_response",
]
