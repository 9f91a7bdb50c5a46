# api/middleware/request_logger.py
"""
Structured request logging middleware for observability
"""
import time
import uuid
import logging
from fastapi import Request
from typing import Dict, Any

logger = logging.getLogger(__name__)


class RequestLoggerMiddleware:
    """Structured request logging with correlation IDs"""

    def __init__(self):
        self.request_count = 0
        self.total_response_time = 0.0

    async def __call__(self, request: Request, call_next):
        correlation_id = str(uuid.uuid4())
        request.state.request_id = correlation_id

        start_time = time.time()
        self.request_count += 1

        logger.info("Request started", extra={"request_data": self._create_request_log(request, correlation_id)})

        try:
            response = await call_next(request)
        except Exception as e:
            response_time = time.time() - start_time
            logger.error("Request failed", extra={"error_data": {
                "correlation_id": correlation_id,
                "error_type": type(e).__name__,
                "path": request.url.path,
                "method": request.method,
                "response_time": response_time,
            }})
            raise

        response_time = time.time() - start_time
        self.total_response_time += response_time
        logger.info("Request completed", extra={"response_data": {
            "correlation_id": correlation_id,
            "status_code": response.status_code,
            "response_time": response_time,
            "path": request.url.path,
            "method": request.method,
            "success": 200 <= response.status_code < 400,
        }})

        response.headers["X-Correlation-ID"] = correlation_id
        response.headers["X-Response-Time"] = f"{response_time:.3f}s"
        return response

    def _create_request_log(self, request: Request, correlation_id: str) -> Dict[str, Any]:
        """Request metadata only; headers and bodies may carry patient data or keys"""
        return {
            "correlation_id": correlation_id,
            "method": request.method,
            "path": request.url.path,
            "client_ip": self._get_client_ip(request),
            "user_agent": request.headers.get("user-agent"),
            "content_type": request.headers.get("content-type"),
            "request_size": request.headers.get("content-length", "unknown"),
        }

    def _get_client_ip(self, request: Request) -> str:
        forwarded_for = request.headers.get("X-Forwarded-For")
        if forwarded_for:
            return forwarded_for.split(",")[0].strip()

        real_ip = request.headers.get("X-Real-IP")
        if real_ip:
            return real_ip

        return request.client.host if request.client else "unknown"

    def get_stats(self) -> Dict[str, Any]:
        """Get request statistics"""
        avg_response_time = (
            self.total_response_time / self.request_count
            if self.request_count > 0 else 0
        )

        return {
            "total_requests": self.request_count,
            "average_response_time": avg_response_time,
        }
