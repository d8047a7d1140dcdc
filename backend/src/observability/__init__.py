"""Observability module for the KYC service.

Provides structured logging, metrics, request correlation, and health checks.
"""

from .logging_config import configure_logging, get_logger
from .metrics import (
    kyc_admin_actions_total,
    kyc_http_request_duration_seconds,
    kyc_http_requests_total,
    kyc_submissions_total,
    kyc_upload_attempts_total,
    kyc_upload_duration_seconds,
)
from .context import RequestContext, bind_actor, current_context, get_request_id, request_context
from .middleware import RequestIDMiddleware

__all__ = [
    # Logging
    "configure_logging",
    "get_logger",
    # Metrics
    "kyc_admin_actions_total",
    "kyc_http_request_duration_seconds",
    "kyc_http_requests_total",
    "kyc_submissions_total",
    "kyc_upload_attempts_total",
    "kyc_upload_duration_seconds",
    # Request context
    "RequestContext",
    "bind_actor",
    "current_context",
    "get_request_id",
    "request_context",
    # Middleware
    "RequestIDMiddleware",
]
