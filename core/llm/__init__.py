# core/llm/__init__.py
"""Vision model backends"""

from .vision import VisionBackend, GeminiVisionBackend, OllamaVisionBackend, build_backend

__all__ = ["VisionBackend", "GeminiVisionBackend", "OllamaVisionBackend", "build_backend"]
