"""
Environment configuration for the RxLens prescription reader
"""
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Tuple
from dotenv import load_dotenv

load_dotenv()  # load .env early

def _get(name: str, default=None, *, strip: bool = True):
    v = os.getenv(name, default)
    if strip and isinstance(v, str):
        v = v.strip()
    return v

def _get_bool(name: str, default: str = "false") -> bool:
    return (_get(name, default) or default).lower() in {"1", "true", "yes", "on"}

def _get_int(name: str, default: int) -> int:
    try:
        return int(_get(name, str(default)))
    except (TypeError, ValueError):
        return default

def _get_float(name: str, default: float) -> float:
    try:
        return float(_get(name, str(default)))
    except (TypeError, ValueError):
        return default

# ---------- Data paths ----------
STATIC_DIR = Path(__file__).resolve().parent.parent / "static"

SUPPORTED_PROVIDERS = ("gemini", "ollama")


@dataclass(frozen=True)
class Settings:
    """Process-wide configuration, read-only after startup."""

    # ---------- App ----------
    app_host: str = "127.0.0.1"
    app_port: int = 8000
    debug: bool = False
    cors_origins: Tuple[str, ...] = ("*",)

    # ---------- Inference ----------
    inference_provider: str = "gemini"
    gemini_api_key: str = field(default="", repr=False)
    gemini_model: str = "gemini-2.5-flash"
    ollama_base_url: str = ""
    ollama_vision_model: str = "llava"
    inference_timeout_s: float = 60.0

    # ---------- Limits ----------
    max_upload_bytes: int = 10 * 1024 * 1024
    max_report_body_bytes: int = 15 * 1024 * 1024

    @property
    def model_name(self) -> str:
        if self.inference_provider == "ollama":
            return self.ollama_vision_model
        return self.gemini_model

    @property
    def secrets(self) -> Tuple[str, ...]:
        """Values that must never appear in logs or responses."""
        return tuple(s for s in (self.gemini_api_key,) if s)


def load_settings() -> Settings:
    """Build the settings once from the environment (and .env)."""
    origins = _get("CORS_ORIGINS", "*") or "*"
    settings = Settings(
        app_host=_get("APP_HOST") or "127.0.0.1",
        app_port=_get_int("APP_PORT", 8000),
        debug=_get_bool("DEBUG"),
        cors_origins=tuple(o.strip() for o in origins.split(",") if o.strip()) or ("*",),
        inference_provider=(_get("INFERENCE_PROVIDER", "gemini") or "gemini").lower(),
        gemini_api_key=_get("GEMINI_API_KEY", "") or "",
        gemini_model=_get("GEMINI_MODEL") or "gemini-2.5-flash",
        ollama_base_url=_get("OLLAMA_BASE_URL", "") or "",
        ollama_vision_model=_get("OLLAMA_VISION_MODEL") or "llava",
        inference_timeout_s=_get_float("INFERENCE_TIMEOUT_S", 60.0),
        max_upload_bytes=_get_int("MAX_UPLOAD_BYTES", 10 * 1024 * 1024),
        max_report_body_bytes=_get_int("MAX_REPORT_BODY_BYTES", 15 * 1024 * 1024),
    )

    if settings.inference_provider == "gemini" and not settings.gemini_api_key:
        print("⚠️  Warning: GEMINI_API_KEY not set in .env")
    if settings.inference_provider == "ollama" and not settings.ollama_base_url:
        print("⚠️  Warning: OLLAMA_BASE_URL not set in .env, using the client default")

    return settings
