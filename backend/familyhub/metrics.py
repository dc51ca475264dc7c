from prometheus_client import Counter, Histogram

REQUEST_COUNT = Counter(
    "familyhub_requests_total", "Total HTTP requests", ["method", "path", "status"]
)
REQUEST_LATENCY = Histogram(
    "familyhub_request_latency_seconds", "Latency of HTTP requests", ["method", "path"]
)

# Application-level domain metrics
CALENDAR_LOAD_COUNT = Counter(
    "familyhub_calendar_load_total", "Total calendar loads", ["family_group"]
)
CALENDAR_LOAD_DURATION = Histogram(
    "familyhub_calendar_load_duration_seconds", "Latency of calendar reconciliation"
)
REMOTE_FETCH_FAILURES = Counter(
    "familyhub_calendar_remote_fetch_failures_total", "Stored event fetches that failed during calendar load"
)
NOTIFICATIONS_GENERATED = Counter(
    "familyhub_notifications_generated_total", "Reminder notifications generated", ["kind"]
)
