"""
Recipe Share Logging Middleware
Structured request/response logging with request ids
"""

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
import structlog
import time
import uuid
from typing import Dict, Any, Optional
from contextvars import ContextVar

from core.monitoring import record_request
from utils.request_utils import get_client_ip, get_user_agent

logger = structlog.get_logger()

# Context variables for request tracking
request_id_var: ContextVar[str] = ContextVar('request_id', default='')


class LoggingMiddleware(BaseHTTPMiddleware):
    """
    Logging middleware that provides:
    - Request/response logging with unique IDs
    - Request id bound into every log line emitted while handling the request
    - Masking of credential headers
    """

    def __init__(self, app):
        super().__init__(app)

        # Paths to exclude from detailed logging
        self.exclude_paths = {
            "/api/v1/health", "/favicon.ico"
        }

        # Sensitive headers to mask in logs
        self.sensitive_headers = {
            "authorization", "cookie", "x-api-key", "x-session-id"
        }

    async def dispatch(self, request: Request, call_next):
        """Process request with logging"""
        start_time = time.time()
        request_id = request.headers.get("x-request-id") or str(uuid.uuid4())

        request_id_var.set(request_id)
        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(request_id=request_id)
        request.state.request_id = request_id

        try:
            if any(request.url.path.startswith(path) for path in self.exclude_paths):
                response = await call_next(request)
                response.headers["X-Request-ID"] = request_id
                return response

            request_info = self._extract_request_info(request)
            logger.info("Request started", **request_info, event_type="request_start")

            response = await call_next(request)

            process_time = time.time() - start_time
            record_request(request.method, response.status_code, process_time)
            logger.log(
                self._determine_log_level(response.status_code),
                "Request completed",
                method=request.method,
                path=request.url.path,
                status_code=response.status_code,
                process_time=round(process_time, 4),
                event_type="request_complete"
            )

            response.headers["X-Request-ID"] = request_id
            return response

        except Exception as e:
            logger.error(
                "Request failed",
                method=request.method,
                path=request.url.path,
                client_ip=get_client_ip(request),
                process_time=round(time.time() - start_time, 4),
                error=str(e),
                error_type=type(e).__name__,
                event_type="request_error"
            )
            raise

        finally:
            structlog.contextvars.clear_contextvars()

    def _extract_request_info(self, request: Request) -> Dict[str, Any]:
        return {
            "method": request.method,
            "path": request.url.path,
            "query_params": dict(request.query_params),
            "client_ip": get_client_ip(request),
            "user_agent": get_user_agent(request),
            "headers": self._filter_headers(dict(request.headers)),
        }

    def _filter_headers(self, headers: Dict[str, str]) -> Dict[str, str]:
        """Filter sensitive headers from logs"""
        filtered = {}
        for key, value in headers.items():
            if key.lower() in self.sensitive_headers:
                filtered[key] = "***MASKED***"
            else:
                filtered[key] = value
        return filtered

    def _determine_log_level(self, status_code: int) -> int:
        """Determine appropriate log level based on status code"""
        if status_code >= 500:
            return 40  # ERROR
        elif status_code >= 400:
            return 30  # WARNING
        else:
            return 20  # INFO


# Utility functions for structured logging
def get_request_id() -> str:
    """Get current request ID from context"""
    return request_id_var.get()


def log_user_activity(activity: str, user_id: Optional[str] = None, details: Dict[str, Any] = None):
    """Log user activity with context"""
    logger.info(
        "User activity",
        user_id=user_id,
        activity=activity,
        details=details or {},
        event_type="user_activity"
    )


def log_business_event(event: str, data: Dict[str, Any] = None):
    """Log business events for analytics"""
    logger.info(
        "Business event",
        event=event,
        data=data or {},
        event_type="business_event"
    )
