"""Audit hooks — records ledger mutations for the audit trail."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Optional

logger = logging.getLogger(__name__)


def log_mutation(
    operation: str,
    scope: Optional[int] = None,
    details: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """Record a ledger mutation in the audit log.

    Returns the audit entry dict for downstream persistence.
    """
    entry = {
        "operation": operation,
        "scope": scope,
        "details": details or {},
        "timestamp": datetime.now(tz=timezone.utc).isoformat(),
    }
    logger.info("Ledger audit: %s → scope %s", operation, scope if scope is not None else "all")
    return entry
