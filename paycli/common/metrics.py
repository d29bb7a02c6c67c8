"""Prometheus metric definitions for command processing."""

from prometheus_client import Counter, Histogram, generate_latest


commands_total = Counter(
    "commands_total",
    "Total commands processed by outcome",
    ["service", "command", "outcome"],
)
command_latency_seconds = Histogram(
    "command_latency_seconds",
    "Command handling latency seconds",
    ["service", "command"],
)
payment_transitions_total = Counter(
    "payment_transitions_total",
    "Total payment state writes",
    ["service", "from_state", "to_state"],
)
idempotent_replays_total = Counter(
    "idempotent_replays_total",
    "Repeated commands accepted without a state change",
    ["service", "command"],
)


def render_metrics() -> bytes:
    """Render all registered Prometheus metrics in text format."""

    return generate_latest()
