# api/schemas/requests.py
"""
Request validation schemas using Pydantic
"""
from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Optional

from core.envelope import AnalysisEnvelope


class ReportRequest(BaseModel):
    """Envelope posted back to the download endpoint"""

    model_config = ConfigDict(
        extra="ignore",
        json_schema_extra={
            "example": {
                "result": "Medicine Name: Paracetamol\nDosage: 500mg twice daily\nPurpose: Fever\n",
                "image": "data:image/jpeg;base64,/9j/4AAQ...",
            }
        },
    )

    result: Optional[str] = Field(None, description="Transcription text returned by /api/analyze")
    image: Optional[str] = Field(None, description="data:image/*;base64 URI returned by /api/analyze")

    @field_validator("result", "image", mode="before")
    @classmethod
    def blank_as_missing(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v

    def to_envelope(self) -> AnalysisEnvelope:
        return AnalysisEnvelope(text=self.result, image_data_uri=self.image)
