"""JSONL event logger - append-only record of registry activity"""

from __future__ import annotations

import json
from collections import deque
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from ..config_schema import LoggingConfig


class EventLogger:
    """Append-only event log with an in-memory buffer and optional JSONL file.

    Every event carries a monotonic ``sequence`` for ordering, a UTC
    ``timestamp`` and an ``event_type``. The registry logs one event per
    successful mutating operation, after the state change has been made.
    """

    output_path: Path | None
    _buffer: deque[dict[str, Any]]
    _sequence: int
    _default_recent: int

    def __init__(
        self,
        output_file: str | Path | None = None,
        buffer_size: int = 1000,
        default_recent: int = 50,
    ) -> None:
        """Initialize the event logger.

        Args:
            output_file: JSONL file to append to. Cleared on init. None keeps
                events in memory only.
            buffer_size: How many events to keep in memory for reads
            default_recent: Events returned by read_recent() with no count
        """
        self._buffer = deque(maxlen=buffer_size)
        self._sequence = 0
        self._default_recent = default_recent
        self.output_path = Path(output_file) if output_file else None
        if self.output_path is not None:
            self.output_path.parent.mkdir(parents=True, exist_ok=True)
            # New log per run
            self.output_path.write_text("")

    @classmethod
    def from_config(cls, config: LoggingConfig) -> "EventLogger":
        return cls(
            output_file=config.events_file,
            buffer_size=config.buffer_size,
            default_recent=config.default_recent,
        )

    @property
    def sequence(self) -> int:
        """Sequence number of the last event logged (0 if none)."""
        return self._sequence

    def log(self, event_type: str, data: dict[str, Any]) -> None:
        """Log an event."""
        self._sequence += 1
        event: dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "sequence": self._sequence,
            "event_type": event_type,
            **data,
        }
        self._buffer.append(event)
        if self.output_path is not None:
            with open(self.output_path, "a") as f:
                f.write(json.dumps(event) + "\n")

    def read_recent(self, n: int | None = None) -> list[dict[str, Any]]:
        """Read the last N events, oldest first.

        N defaults to the configured default_recent.
        """
        if n is None:
            n = self._default_recent
        if n <= 0:
            return []
        events = list(self._buffer)
        return events[-n:]

    def read_file(self) -> list[dict[str, Any]]:
        """Read every event written to the JSONL file."""
        if self.output_path is None or not self.output_path.exists():
            return []
        lines = self.output_path.read_text().strip().split("\n")
        return [json.loads(line) for line in lines if line]
