from __future__ import annotations

import json
import logging
import sys
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Any, Optional


# Context variables for enriched logging
correlation_id_var: ContextVar[Optional[str]] = ContextVar("correlation_id", default=None)
username_var: ContextVar[Optional[str]] = ContextVar("username", default=None)

audit_logger = logging.getLogger("carwash_api.audit")


class LoggingContextFilter(logging.Filter):
    """
    Logging filter that injects correlation_id and the authenticated username
    from contextvars into each log record so formatters can include them.

    If no values are present in the context, placeholders are used.
    """

    def filter(self, record: logging.LogRecord) -> bool:  # noqa: D401
        cid = correlation_id_var.get()
        user = username_var.get()
        setattr(record, "correlation_id", cid or "-")
        setattr(record, "username", user or "-")
        return True


# PUBLIC_INTERFACE
def configure_logging(level: int | str = logging.INFO) -> None:
    """Configure root logging with a structured format and context filter."""
    handler = logging.StreamHandler(stream=sys.stdout)
    fmt = (
        "%(asctime)s | %(levelname)s | %(name)s | cid=%(correlation_id)s | user=%(username)s | "
        "%(message)s"
    )
    formatter = logging.Formatter(fmt=fmt)
    handler.setFormatter(formatter)
    handler.addFilter(LoggingContextFilter())

    root = logging.getLogger()
    # Remove pre-existing default handlers configured elsewhere (e.g., basicConfig)
    for h in list(root.handlers):
        root.removeHandler(h)
    root.addHandler(handler)
    root.setLevel(level)


# PUBLIC_INTERFACE
def audit(action: str, **fields: Any) -> None:
    """
    Emit a fiscal audit record as a single JSON line on the audit logger.

    Values that are not JSON-native (UUID, Decimal, datetime) are stringified.
    """
    record = {
        "action": action,
        "timestamp": datetime.now(tz=timezone.utc).isoformat(),
        "correlation_id": correlation_id_var.get(),
        **fields,
    }
    audit_logger.info("AUDIT_LOG %s", json.dumps(record, default=str, ensure_ascii=False))
