from __future__ import annotations

import logging

from ..metrics.registry import STORE_OPERATION_LATENCY_SECONDS, STORE_OPERATIONS_TOTAL

logger = logging.getLogger(__name__)


def observe_store_op(operation: str, status: str, latency_s: float) -> None:
    """
    Record one store operation.

    Metric failures are logged and dropped so they never change a store result.
    """
    try:
        STORE_OPERATIONS_TOTAL.labels(operation=operation, status=status).inc()
        STORE_OPERATION_LATENCY_SECONDS.labels(operation=operation).observe(latency_s)
    except Exception:
        logger.exception("failed to record metrics for %s", operation)
