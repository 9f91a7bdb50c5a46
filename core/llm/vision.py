# core/llm/vision.py
"""Vision backends - prompt + image in, plain text out"""

import base64
import logging
from typing import Protocol

import google.generativeai as genai
import ollama

from config.env_config import Settings, SUPPORTED_PROVIDERS
from core.ingestion import UploadedImage

logger = logging.getLogger(__name__)


class VisionBackend(Protocol):
    """Opaque inference capability: infer(prompt, image) -> text, or raise"""

    name: str
    model: str

    async def infer(self, prompt: str, image: UploadedImage) -> str:
        ...


class GeminiVisionBackend:
    """Google Gemini through the google-generativeai SDK"""

    name = "gemini"

    def __init__(self, api_key: str, model: str = "gemini-2.5-flash"):
        genai.configure(api_key=api_key)
        self.model = model
        self._model = genai.GenerativeModel(model)

    async def infer(self, prompt: str, image: UploadedImage) -> str:
        response = await self._model.generate_content_async(
            [prompt, {"mime_type": image.media_type, "data": image.data}]
        )
        # .text raises ValueError when the candidate was blocked or has no parts
        return response.text


class OllamaVisionBackend:
    """Local multimodal model served by Ollama"""

    name = "ollama"

    def __init__(self, host: str = "", model: str = "llava"):
        self.client = ollama.AsyncClient(host=host or None)
        self.model = model

    async def infer(self, prompt: str, image: UploadedImage) -> str:
        b64 = base64.b64encode(image.data).decode()
        r = await self.client.chat(
            model=self.model,
            messages=[{"role": "user", "content": prompt, "images": [b64]}],
            stream=False,
            options={"temperature": 0.1, "num_ctx": 4096},
        )
        return r.get("message", {}).get("content", "")


def build_backend(settings: Settings) -> VisionBackend:
    """Select the vision backend named by settings.inference_provider"""
    provider = settings.inference_provider
    if provider == "gemini":
        backend = GeminiVisionBackend(settings.gemini_api_key, settings.gemini_model)
    elif provider == "ollama":
        backend = OllamaVisionBackend(settings.ollama_base_url, settings.ollama_vision_model)
    else:
        raise ValueError(
            f"Unknown INFERENCE_PROVIDER '{provider}'. Supported: {', '.join(SUPPORTED_PROVIDERS)}"
        )
    logger.info(f"Vision backend: {backend.name} ({backend.model})")
    return backend
