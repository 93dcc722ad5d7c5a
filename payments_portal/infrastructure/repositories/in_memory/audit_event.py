"""
In-Memory Audit Event Repository for testing and development.

NOT FOR PRODUCTION USE - data is lost on restart.
"""

from __future__ import annotations

from threading import Lock
from typing import List

from ....domain.audit import AuditEvent


class InMemoryAuditEventRepository:
    """
    In-memory implementation of AuditEventRepository.

    Useful for:
      - Unit testing (assert on emitted actions)
      - Local development without database
    """

    def __init__(self) -> None:
        self._lock = Lock()
        self._events: List[AuditEvent] = []

    def record_event(self, event: AuditEvent) -> None:
        with self._lock:
            self._events.append(event)

    # -------------------------------------------------------------------------
    # Testing helpers
    # -------------------------------------------------------------------------
    def list_events(self, *, action: str | None = None) -> List[AuditEvent]:
        with self._lock:
            events = list(self._events)
        if action is not None:
            events = [e for e in events if e.action == action]
        return events

    def actions(self) -> List[str]:
        with self._lock:
            return [e.action for e in self._events]

    def clear(self) -> None:
        with self._lock:
            self._events.clear()
