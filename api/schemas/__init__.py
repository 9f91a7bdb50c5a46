# api/schemas/__init__.py
"""
Pydantic schemas for API request/response validation
"""
from .requests import ReportRequest
from .responses import AnalysisResponse, HealthResponse
from .errors import ErrorResponse

__all__ = [
    # Requests
    "ReportRequest",

    # Responses
    "AnalysisResponse",
    "HealthResponse",

    # Errors
    "ErrorResponse",
]
