"""
Middleware for request logging and error handling.
"""
import logging
import time
from uuid import uuid4

from django.http import JsonResponse

from orders.domain.exceptions import DomainError

logger = logging.getLogger(__name__)


class ErrorHandler:
    """Error handler for API responses."""

    ERROR_CODES = {
        "VALIDATION_ERROR": 400,
        "NOT_FOUND": 404,
        "CONFLICT": 409,
        "INVALID_STATE": 400,
        "ALREADY_PAID": 400,
        "INSUFFICIENT_STOCK": 400,
        "MALFORMED_WEBHOOK": 400,
        "UNAUTHORIZED": 401,
        "FORBIDDEN": 403,
        "SIMULATION_DISABLED": 403,
        "PAYMENT_GATEWAY_ERROR": 502,
        "STOCK_INCONSISTENCY": 500,
        "INTERNAL_ERROR": 500,
    }

    @classmethod
    def status_for(cls, error: DomainError) -> int:
        return cls.ERROR_CODES.get(error.code, 400)

    @classmethod
    def handle_error(cls, error: Exception) -> JsonResponse:
        """Handle error and return JSON response."""
        if isinstance(error, DomainError):
            status_code = cls.status_for(error)
            if status_code >= 500:
                logger.error(
                    "domain_error",
                    extra={"error_type": type(error).__name__, "error": error.message},
                )
            return JsonResponse(
                {
                    "error": {
                        "code": error.code,
                        "message": error.message,
                    }
                },
                status=status_code,
            )

        # Log unexpected errors
        logger.error(
            "unexpected_error",
            extra={
                "error_type": type(error).__name__,
                "error": str(error),
            },
            exc_info=error,
        )

        return JsonResponse(
            {
                "error": {
                    "code": "INTERNAL_ERROR",
                    "message": "An internal error occurred",
                }
            },
            status=500,
        )


class RequestLoggingMiddleware:
    """Attach a request id to every request and log request/response pairs."""

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        request.request_id = request.headers.get("X-Request-ID") or str(uuid4())
        started = time.monotonic()

        response = self.get_response(request)

        logger.info(
            "http_request",
            extra={
                "request_id": request.request_id,
                "method": request.method,
                "path": request.path,
                "status": response.status_code,
                "duration_ms": round((time.monotonic() - started) * 1000, 1),
            },
        )
        response["X-Request-ID"] = request.request_id
        return response
