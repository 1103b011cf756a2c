"""Record of chaos decisions applied during a run."""

from __future__ import annotations

import threading
from collections import Counter, deque
from datetime import UTC, datetime

from pydantic import BaseModel

from laggy.models import Decision, DecisionKind

DEFAULT_MAX_RECORDS = 10_000


class InterceptRecord(BaseModel):
    """One intercepted request and the decision taken for it."""

    timestamp: datetime
    method: str
    target: str
    decision: Decision

    @property
    def kind(self) -> DecisionKind:
        return DecisionKind(self.decision.kind)


class InterceptRecorder:
    """Collect :class:`InterceptRecord` entries from concurrent requests.

    All mutations and snapshot reads take an explicit lock, so the recorder
    can be shared by a transport serving many threads.

    Only the newest *max_records* entries are kept; older ones are dropped
    as new requests arrive.  Pass ``None`` to keep everything.
    """

    def __init__(self, max_records: int | None = DEFAULT_MAX_RECORDS) -> None:
        if max_records is not None and max_records < 1:
            raise ValueError(f"max_records must be positive, got {max_records}")
        self._records: deque[InterceptRecord] = deque(maxlen=max_records)
        self._lock: threading.Lock = threading.Lock()

    @property
    def max_records(self) -> int | None:
        return self._records.maxlen

    def record(self, method: str, target: str, decision: Decision) -> InterceptRecord:
        """Append a record for *decision* stamped with the current UTC time."""
        entry = InterceptRecord(
            timestamp=datetime.now(tz=UTC),
            method=method,
            target=target,
            decision=decision,
        )
        with self._lock:
            self._records.append(entry)
        return entry

    def get_records(self) -> list[InterceptRecord]:
        """Return a copy of the retained records, oldest first."""
        with self._lock:
            return list(self._records)

    def clear(self) -> None:
        """Discard all records."""
        with self._lock:
            self._records.clear()

    def summary(self) -> dict[str, int]:
        """Count records per :class:`DecisionKind`, plus a ``total``.

        Zero-length delays are counted as ``passthrough``.
        """
        counts: Counter[str] = Counter({kind.value: 0 for kind in DecisionKind})
        for entry in self.get_records():
            kind = entry.kind
            if kind is DecisionKind.delay and entry.decision.delay_ms == 0:  # type: ignore[union-attr]
                kind = DecisionKind.passthrough
            counts[kind.value] += 1
        result = dict(counts)
        result["total"] = sum(counts.values())
        return result


__all__ = ["DEFAULT_MAX_RECORDS", "InterceptRecord", "InterceptRecorder"]
