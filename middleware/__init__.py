"""
Recipe Share Middleware
Request logging middleware and structured event helpers
"""

from .logging import LoggingMiddleware, get_request_id, log_user_activity, log_business_event

__all__ = [
    "LoggingMiddleware",
    "get_request_id",
    "log_user_activity",
    "log_business_event"
]
