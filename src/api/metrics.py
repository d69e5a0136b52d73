import time

from prometheus_client import Counter, Histogram, Gauge, REGISTRY


# we check if they are already registered to avoid errors during hot reloads or test runs
def get_or_create_metric(name, documentation, metric_type, **kwargs):
    try:
        return metric_type(name, documentation, **kwargs)
    except ValueError:
        return REGISTRY._names_to_collectors[name]


REQUESTS_TOTAL = get_or_create_metric(
    "assistant_requests_total",
    "Total requests",
    Counter,
    labelnames=["endpoint", "status"],
)

REQUEST_LATENCY_SECONDS = get_or_create_metric(
    "assistant_request_latency_seconds",
    "Request latency",
    Histogram,
    labelnames=["endpoint"],
)

COMMANDS_TOTAL = get_or_create_metric(
    "assistant_commands_total",
    "Handled utterances by resulting intent",
    Counter,
    labelnames=["type"],
)

CONFIRMATIONS_TOTAL = get_or_create_metric(
    "assistant_confirmations_total",
    "Replies to pending task confirmations",
    Counter,
    labelnames=["decision"],
)

CONFLICTS_TOTAL = get_or_create_metric(
    "assistant_conflicts_total",
    "Scheduling conflicts reported",
    Counter,
    labelnames=["conflict_type"],
)

PENDING_CONFIRMATIONS = get_or_create_metric(
    "assistant_pending_confirmations",
    "Conversations currently awaiting a yes/no",
    Gauge,
)


def record_request(endpoint: str, status: str, started: float) -> None:
    REQUESTS_TOTAL.labels(endpoint=endpoint, status=status).inc()
    REQUEST_LATENCY_SECONDS.labels(endpoint=endpoint).observe(time.time() - started)


def record_conflicts(conflicts) -> None:
    for conflict in conflicts or []:
        CONFLICTS_TOTAL.labels(conflict_type=conflict["conflict_type"]).inc()
