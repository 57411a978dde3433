"""Logging setup and structured logging for gateway calls."""

import logging
from typing import Any

logger = logging.getLogger(__name__)


def configure_logging(level: str = "INFO") -> None:
    """Configure root logging once for the API process."""
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s | %(name)s | %(levelname)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


class GatewayCallLogger:
    """Structured logger for managed service calls."""

    def log_call(
        self,
        gateway: str,
        operation: str,
        outcome: str,
        latency_ms: float,
        error_reason: str | None = None,
        **fields: Any,
    ) -> None:
        """Log one gateway call with structured data."""
        log_data: dict[str, Any] = {
            "gateway": gateway,
            "operation": operation,
            "outcome": outcome,
            "latency_ms": round(latency_ms, 2),
            **fields,
        }

        if error_reason:
            log_data["error_reason"] = error_reason

        log_msg = f"Gateway call: {gateway}.{operation} - {outcome}"

        if outcome == "success":
            logger.info(log_msg, extra={"structured": log_data})
        else:
            logger.warning(log_msg, extra={"structured": log_data})
