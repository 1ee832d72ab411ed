from prometheus_client import Counter, Histogram

STORE_OPERATIONS_TOTAL = Counter(
    "usersrw_store_operations_total",
    "Record store operations by outcome status",
    ["operation", "status"],
)

STORE_OPERATION_LATENCY_SECONDS = Histogram(
    "usersrw_store_operation_latency_seconds",
    "Record store operation latency",
    ["operation"],
)

NOTIFICATIONS_TOTAL = Counter(
    "usersrw_notifications_total",
    "User event notifications by message type and delivery status",
    ["type", "status"],
)
