"""Prometheus metrics for seller KYC.

Defines and exposes operational metrics for monitoring and alerting.
"""

from prometheus_client import Counter, Histogram

# Document upload metrics
kyc_upload_attempts_total = Counter(
    "kyc_upload_attempts_total",
    "Total storage upload attempts for KYC documents",
    ["doc_type", "outcome"]  # outcome: success|error
)

kyc_upload_duration_seconds = Histogram(
    "kyc_upload_duration_seconds",
    "Time spent uploading one KYC document including retries",
    ["doc_type"],
    buckets=[0.1, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0, 60.0]
)

# Submission metrics
kyc_submissions_total = Counter(
    "kyc_submissions_total",
    "Total KYC submissions",
    ["source", "outcome"]  # source: wizard|bulk, outcome: success|error
)

# Admin workflow metrics
kyc_admin_actions_total = Counter(
    "kyc_admin_actions_total",
    "Total admin actions on KYC records",
    ["action", "outcome"]  # action: approve|reject|update|delete
)

# HTTP metrics, labelled by route template to keep cardinality bounded
kyc_http_requests_total = Counter(
    "kyc_http_requests_total",
    "Total HTTP requests handled by the KYC API",
    ["method", "route", "status_code"]
)

kyc_http_request_duration_seconds = Histogram(
    "kyc_http_request_duration_seconds",
    "HTTP request latency",
    ["method", "route"],
    buckets=[0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0]
)
