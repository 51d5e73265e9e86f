"""Prometheus metrics shared across the application"""

from prometheus_client import Counter, Histogram, Gauge

REQUEST_COUNT = Counter(
    "scaffold_http_requests_total",
    "Total HTTP requests",
    ["method", "path", "status"],
)
REQUEST_LATENCY = Histogram(
    "scaffold_http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "path"],
)
# Low-cardinality labels only: never user ids or emails.
AUTH_EVENTS = Counter(
    "scaffold_auth_events_total",
    "Authentication events by type and outcome",
    ["event", "outcome"],
)
TOKEN_SWEEPER_UP = Gauge("scaffold_token_sweeper_up", "Token sweeper liveness (1 running, 0 stopped)")
EXPIRED_TOKENS_DELETED = Counter(
    "scaffold_expired_refresh_tokens_deleted_total",
    "Expired refresh tokens removed by the sweeper",
)
