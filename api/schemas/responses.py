# api/schemas/responses.py
"""
Response schemas for consistent API responses
"""
from pydantic import BaseModel, ConfigDict, Field
from typing import Any, Dict, Optional

from core.envelope import AnalysisEnvelope


class AnalysisResponse(BaseModel):
    """Transcription plus the original image as a data URI"""

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "result": "Medicine Name: Paracetamol\nDosage: 500mg twice daily\nPurpose: Fever",
                "image": "data:image/jpeg;base64,/9j/4AAQ...",
            }
        }
    )

    result: str = Field(..., description="Plain-text transcription")
    image: str = Field(
        ...,
        pattern=r"^data:image/\w+;base64,",
        description="Uploaded image as a data URI",
    )

    @classmethod
    def from_envelope(cls, envelope: AnalysisEnvelope) -> "AnalysisResponse":
        return cls(result=envelope.text, image=envelope.image_data_uri)


class HealthResponse(BaseModel):
    """Health check response schema"""

    status: str = Field("healthy", description="Service status")
    service: str = Field("RxLens", description="Service name")
    version: str = Field(..., description="Service version")
    inference_provider: str = Field(..., description="Configured vision backend")
    model: str = Field(..., description="Vision model name")
    uptime: float = Field(..., description="Uptime in seconds")
    middleware_stats: Optional[Dict[str, Any]] = Field(None, description="Error and request counters")
