"""SSE event types and serialization for ledger change notifications."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any

DEFAULT_CHANNEL = "ledger"


class LedgerEventType(str, Enum):
    """All event types broadcast to read-only consumers."""

    # Entry lifecycle
    ENTRY_ADDED = "entry_added"
    ENTRY_REMOVED = "entry_removed"
    SCOPE_REPLACED = "scope_replaced"
    SCOPE_CLEARED = "scope_cleared"
    LEDGER_RESET = "ledger_reset"

    # Scope-3 reconciliation
    MODE_CHANGED = "mode_changed"
    REVIEW_APPLIED = "review_applied"
    DEGRADED_ADVANCED_DATA = "degraded_advanced_data"

    # Aggregates
    TOTALS_UPDATED = "totals_updated"


@dataclass
class SSEEvent:
    """A single Server-Sent Event ready for wire serialization."""

    event_type: LedgerEventType
    data: dict[str, Any]
    sequence_id: int
    channel: str = DEFAULT_CHANNEL
    timestamp: datetime = field(default_factory=lambda: datetime.now(tz=timezone.utc))

    def to_sse_string(self) -> str:
        """Serialize to SSE wire format.

        Format:
            event: <type>
            data: <json>
            id: <seq>

            (terminated by double newline)

        The JSON body carries the channel and sequence alongside the
        event data so consumers can detect gaps without parsing `id:`.
        """
        payload = {
            **self.data,
            "channel": self.channel,
            "sequence": self.sequence_id,
            "timestamp": self.timestamp.isoformat(),
        }
        data_json = json.dumps(payload, default=str)
        return f"event: {self.event_type.value}\ndata: {data_json}\nid: {self.sequence_id}\n\n"
