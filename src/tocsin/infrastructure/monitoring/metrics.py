"""
Prometheus metrics collection.

Delivery outcomes are recorded here; broadcast callers never see them.
"""

from prometheus_client import Counter, Gauge

# ============================================================
# Connection Metrics
# ============================================================

connections_opened_total = Counter(
    "tocsin_connections_opened_total",
    "Total WebSocket connections accepted",
)

connections_closed_total = Counter(
    "tocsin_connections_closed_total",
    "Total WebSocket connections closed",
)

live_connections = Gauge(
    "tocsin_live_connections",
    "Currently open WebSocket connections",
)

registered_clients = Gauge(
    "tocsin_registered_clients",
    "Entries in the client registry",
)

admin_connections = Gauge(
    "tocsin_admin_connections",
    "Connections in the admin set",
)

# ============================================================
# Authentication Metrics
# ============================================================

auth_attempts_total = Counter(
    "tocsin_auth_attempts_total",
    "Authentication messages processed",
    ["role", "outcome"],
)

invalid_messages_total = Counter(
    "tocsin_invalid_messages_total",
    "Inbound frames that could not be decoded",
)

# ============================================================
# Delivery Metrics
# ============================================================

events_delivered_total = Counter(
    "tocsin_events_delivered_total",
    "Events written to a connection",
    ["event_type"],
)

events_dropped_total = Counter(
    "tocsin_events_dropped_total",
    "Events skipped because the target was offline",
    ["event_type", "reason"],
)

events_failed_total = Counter(
    "tocsin_events_failed_total",
    "Events whose send raised",
    ["event_type"],
)
