# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Prometheus metrics: single source of truth for all metric objects.
Imported by services and middleware. Never instantiated in controllers.
"""
from prometheus_client import Counter, Histogram

# ── HTTP Metrics (used by middleware) ──
REQUEST_COUNT = Counter(
    "scheduling_requests_total",
    "Total HTTP requests to the scheduling service",
    ["method", "endpoint", "status"],
)
REQUEST_LATENCY = Histogram(
    "scheduling_request_duration_seconds",
    "Request latency in seconds",
    ["method", "endpoint"],
)
HTTP_ERRORS = Counter(
    "scheduling_http_errors_total",
    "Total HTTP error responses",
    ["method", "endpoint", "status"],
)

# ── Business Metrics (updated by service layer only) ──
ACTIVITIES_CREATED = Counter(
    "scheduling_activities_created_total",
    "Training sessions and events created",
    ["activity"],
)
ENROLLMENTS = Counter(
    "scheduling_enrollments_total",
    "Enrollment attempts by outcome",
    ["activity", "outcome"],
)
STATUS_TRANSITIONS = Counter(
    "scheduling_status_transitions_total",
    "Accepted activity status transitions",
    ["activity", "from_status", "to_status"],
)
ATTENDANCE_MARKED = Counter(
    "scheduling_attendance_marked_total",
    "Attendance marks by status",
    ["status"],
)
ENROLL_RETRIES = Counter(
    "scheduling_enroll_store_retries_total",
    "Enrollment transactions retried after a store conflict",
    ["activity"],
)
