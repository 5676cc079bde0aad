"""Prometheus metrics for order flow, repayment and identity provider health"""

from prometheus_client import Counter, Histogram

# Order metrics
order_created_counter = Counter(
    "agrocredit_orders_created_total",
    "Credit orders submitted by agents",
)

order_decision_counter = Counter(
    "agrocredit_order_decision_total",
    "Admin decisions on pending orders",
    ["outcome"],  # approved | rejected
)

order_value_histogram = Histogram(
    "agrocredit_order_total_cost",
    "Total cost of submitted orders (KES)",
    buckets=[1_000, 5_000, 10_000, 25_000, 50_000, 100_000, 250_000],
)

# Repayment metrics
payment_scheduled_counter = Counter(
    "agrocredit_payments_scheduled_total",
    "Remaining-balance payments created on approval",
)

payment_settled_counter = Counter(
    "agrocredit_payments_settled_total",
    "Payments marked paid",
)

# Farmer metrics
farmers_imported_counter = Counter(
    "agrocredit_farmers_imported_total",
    "Farmers created through bulk upload",
)

farmer_link_counter = Counter(
    "agrocredit_farmer_links_total",
    "Farmers claimed by agents",
)

# Identity provider
identity_failures_counter = Counter(
    "identity_provider_failures_total",
    "Failed identity provider calls",
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_order_created(total_cost) -> None:
    order_created_counter.inc()
    order_value_histogram.observe(float(total_cost))


def record_order_decision(outcome: str) -> None:
    """Count approvals and rejections; an approval also schedules one payment"""
    order_decision_counter.labels(outcome=outcome).inc()
    if outcome == "approved":
        payment_scheduled_counter.inc()
