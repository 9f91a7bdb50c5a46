# core/prescription_analyzer.py
"""
Inference invocation: send the fixed prescription prompt and the uploaded image
to a vision backend and package the transcription as an AnalysisEnvelope.
"""
import asyncio
import logging
import time
from typing import Iterable, Optional

from core.envelope import AnalysisEnvelope, encode_data_uri
from core.errors import InferenceError
from core.ingestion import UploadedImage
from core.llm.vision import VisionBackend
from core.prompts import get_prescription_prompt
from utils.logging_filters import redact_secrets

logger = logging.getLogger(__name__)


def normalize_transcription(text: Optional[str]) -> str:
    """Plain text as returned by the model, with line endings unified and outer whitespace removed.

    Section structure is not checked; whatever the model wrote is kept.
    """
    return (text or "").replace("\r\n", "\n").replace("\r", "\n").strip()


class PrescriptionAnalyzer:
    """Runs one prescription image through the vision backend. No retries, no caching."""

    def __init__(self, backend: VisionBackend, timeout_s: Optional[float] = 60.0,
                 secrets: Iterable[str] = ()):
        self.backend = backend
        self.timeout_s = timeout_s
        self.secrets = tuple(s for s in secrets if s)
        self.prompt = get_prescription_prompt()

    async def analyze(self, image: UploadedImage) -> AnalysisEnvelope:
        start = time.time()
        try:
            raw = await asyncio.wait_for(
                self.backend.infer(self.prompt, image), timeout=self.timeout_s
            )
        except asyncio.TimeoutError:
            logger.error(f"Inference timed out after {self.timeout_s}s ({self.backend.name})")
            raise InferenceError(f"Inference timed out after {self.timeout_s} seconds")
        except Exception as e:
            # SDK errors may quote the request URL, credential included
            message = redact_secrets(str(e) or type(e).__name__, self.secrets)
            logger.error(f"Inference failed ({self.backend.name}): {message}")
            raise InferenceError(message) from e

        text = normalize_transcription(raw)
        if not text:
            raise InferenceError("Empty response from inference backend")

        logger.info(
            f"Transcribed prescription with {self.backend.name} in {time.time() - start:.2f}s "
            f"({len(text)} chars)"
        )
        return AnalysisEnvelope(
            text=text,
            image_data_uri=encode_data_uri(image.data, image.media_type),
        )
