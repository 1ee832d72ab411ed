from .registry import (
    NOTIFICATIONS_TOTAL,
    STORE_OPERATION_LATENCY_SECONDS,
    STORE_OPERATIONS_TOTAL,
)

__all__ = [
    "NOTIFICATIONS_TOTAL",
    "STORE_OPERATION_LATENCY_SECONDS",
    "STORE_OPERATIONS_TOTAL",
]
