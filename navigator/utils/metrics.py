"""Per-request performance metrics, emitted as structured log events"""

from typing import Any, Dict, Optional

import structlog

logger = structlog.get_logger()


def record_metric(
    metric_type: str,
    processing_time_ms: float,
    user_id: Optional[str] = None,
    **fields: Any,
) -> Dict[str, Any]:
    """
    Emit one metric event and return it.

    Events go through the regular log pipeline so they can be shipped and
    aggregated with the rest of the service logs. None-valued fields are
    left out.
    """
    event = {
        "metric_type": metric_type,
        "processing_time_ms": processing_time_ms,
        "user_id": user_id,
        **fields,
    }
    event = {key: value for key, value in event.items() if value is not None}

    logger.info("Request metric", **event)
    return event
