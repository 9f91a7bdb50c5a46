# api/main.py
"""
FastAPI application for the RxLens prescription reader
"""
import logging
import time
from typing import Optional

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from config.env_config import Settings, STATIC_DIR, load_settings
from core.llm.vision import VisionBackend, build_backend
from core.prescription_analyzer import PrescriptionAnalyzer
from utils.logging_filters import install_redaction

# Import middleware
from .middleware import ErrorHandlerMiddleware, RequestLoggerMiddleware, error_response
from .routes import prescription
from .schemas import HealthResponse

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

VERSION = "1.0.0"


def create_app(settings: Optional[Settings] = None, backend: Optional[VisionBackend] = None) -> FastAPI:
    """Build the application. `backend` overrides the provider named in settings."""
    settings = settings or load_settings()
    install_redaction(settings.secrets)

    error_handler = ErrorHandlerMiddleware(debug=settings.debug, secrets=settings.secrets)
    request_logger = RequestLoggerMiddleware()
    start_time = time.time()

    app = FastAPI(
        title="RxLens - Prescription Reader",
        description="Transcribes handwritten prescriptions with a vision model and renders PDF reports.",
        version=VERSION,
        debug=settings.debug,
    )

    app.state.settings = settings
    app.state.analyzer = PrescriptionAnalyzer(
        backend or build_backend(settings),
        timeout_s=settings.inference_timeout_s,
        secrets=settings.secrets,
    )

    # last added = first executed
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.cors_origins),
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.middleware("http")(error_handler)
    app.middleware("http")(request_logger)

    app.add_exception_handler(StarletteHTTPException, error_handler.http_exception_handler)
    app.add_exception_handler(RequestValidationError, error_handler.validation_exception_handler)

    app.include_router(prescription.router, prefix="/api", tags=["Prescription"])

    @app.get("/", include_in_schema=False)
    async def index():
        page = STATIC_DIR / "index.html"
        if not page.exists():
            return error_response(404, "Not Found")
        return FileResponse(str(page), media_type="text/html")

    @app.get("/health", response_model=HealthResponse)
    async def health_check():
        """Liveness only; the vision backend is not called"""
        analyzer: PrescriptionAnalyzer = app.state.analyzer
        return HealthResponse(
            version=VERSION,
            inference_provider=analyzer.backend.name,
            model=analyzer.backend.model,
            uptime=time.time() - start_time,
            middleware_stats={
                "error_handler": error_handler.get_error_stats(),
                "request_logger": request_logger.get_stats(),
            },
        )

    logger.info(f"RxLens ready: provider={app.state.analyzer.backend.name}, model={app.state.analyzer.backend.model}")
    return app


app = create_app()
