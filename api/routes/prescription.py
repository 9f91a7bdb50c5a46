# api/routes/prescription.py
"""
Prescription endpoints: transcribe an uploaded image, then render the result as a PDF
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, Request, UploadFile
from fastapi.responses import Response
from pydantic import ValidationError
from starlette.concurrency import run_in_threadpool

from api.middleware import error_response
from api.schemas import AnalysisResponse, ErrorResponse, ReportRequest
from config.env_config import Settings
from core.errors import PayloadTooLargeError
from core.ingestion import build_uploaded_image
from core.prescription_analyzer import PrescriptionAnalyzer
from core.report import compile_report

logger = logging.getLogger(__name__)

router = APIRouter()

_ERRORS = {
    400: {"model": ErrorResponse},
    405: {"model": ErrorResponse},
    413: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
}


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_analyzer(request: Request) -> PrescriptionAnalyzer:
    return request.app.state.analyzer


async def read_limited_body(request: Request, limit: int) -> bytes:
    """Read the request body, giving up as soon as it exceeds `limit` bytes"""
    declared = request.headers.get("content-length")
    if declared and declared.isdigit() and int(declared) > limit:
        raise PayloadTooLargeError(f"Request body too large. Maximum {limit} bytes allowed.")

    chunks = []
    received = 0
    async for chunk in request.stream():
        received += len(chunk)
        if received > limit:
            raise PayloadTooLargeError(f"Request body too large. Maximum {limit} bytes allowed.")
        chunks.append(chunk)
    return b"".join(chunks)


@router.post("/analyze", response_model=AnalysisResponse, responses=_ERRORS)
async def analyze_prescription(
    image: Optional[UploadFile] = File(None, description="Photo or scan of the prescription"),
    settings: Settings = Depends(get_settings),
    analyzer: PrescriptionAnalyzer = Depends(get_analyzer),
):
    """
    Transcribe a handwritten prescription.
    Returns the plain-text transcription and the uploaded image as a data URI,
    which /api/download accepts back unchanged.
    """
    data = await image.read() if image is not None else None
    uploaded = build_uploaded_image(
        data,
        image.content_type if image is not None else None,
        filename=image.filename if image is not None else None,
        max_bytes=settings.max_upload_bytes,
    )

    envelope = await analyzer.analyze(uploaded)
    return AnalysisResponse.from_envelope(envelope)


@router.post(
    "/download",
    response_class=Response,
    responses={200: {"content": {"application/pdf": {}}}, **_ERRORS},
    openapi_extra={
        "requestBody": {
            "required": False,
            "content": {"application/json": {"schema": ReportRequest.model_json_schema()}},
        }
    },
)
async def download_report(request: Request, settings: Settings = Depends(get_settings)):
    """
    Render {result, image} from /api/analyze into a PDF download.
    At least one of the two fields is required. A broken image only drops the image page.
    """
    body = await read_limited_body(request, settings.max_report_body_bytes)
    try:
        payload = ReportRequest.model_validate_json(body) if body.strip() else ReportRequest()
    except ValidationError as e:
        details = [{"loc": list(err["loc"]), "msg": err["msg"]} for err in e.errors()]
        return error_response(400, "Invalid request body", details)

    # PyMuPDF and Pillow are blocking; keep them off the event loop
    report = await run_in_threadpool(compile_report, payload.to_envelope())
    return Response(
        content=report.data,
        media_type=report.media_type,
        headers={
            "Content-Disposition": f"attachment; filename={report.filename}",
            "X-Report-Pages": str(report.page_count),
        },
    )
