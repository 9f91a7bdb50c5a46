# core/errors.py
"""
Domain exceptions for the analysis and report pipeline.
Each carries the HTTP status the API layer reports it with.
"""
from typing import Any, Optional


class RxLensError(Exception):
    """Base class for errors surfaced to the caller as JSON"""
    status_code = 500
    error_code = "internal_error"

    def __init__(self, message: str, details: Optional[Any] = None):
        self.message = message
        self.details = details
        super().__init__(message)


class NoImageProvidedError(RxLensError):
    status_code = 400
    error_code = "no_image"

    def __init__(self, message: str = "No prescription image uploaded"):
        super().__init__(message)


class InvalidImageError(RxLensError):
    status_code = 400
    error_code = "invalid_image"


class PayloadTooLargeError(RxLensError):
    status_code = 413
    error_code = "payload_too_large"


class EmptyReportRequestError(RxLensError):
    status_code = 400
    error_code = "nothing_to_render"

    def __init__(self, message: str = "Nothing to render: provide 'result' and/or 'image'"):
        super().__init__(message)


class InferenceError(RxLensError):
    """Any failure of the inference backend. Terminal for the request, never retried."""
    status_code = 500
    error_code = "inference_error"


class ReportGenerationError(RxLensError):
    status_code = 500
    error_code = "report_error"

    def __init__(self, details: str):
        super().__init__("PDF generation failed", details=details)


class ImageDecodeError(Exception):
    """Embedded report image could not be decoded. Always recovered by the compiler."""
