# api/schemas/errors.py
"""
Error response schema shared by every endpoint
"""
from pydantic import BaseModel, ConfigDict, Field
from typing import Any, Optional


class ErrorResponse(BaseModel):
    """Standard error response schema"""

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "error": "PDF generation failed",
                "details": "cannot open broken document",
            }
        }
    )

    error: str = Field(..., description="Human-readable error message")
    details: Optional[Any] = Field(None, description="Underlying error, when useful for diagnosis")
