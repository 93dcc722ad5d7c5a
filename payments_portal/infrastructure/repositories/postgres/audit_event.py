"""
============================================================
TARJETA CRC — infrastructure/repositories/postgres/audit_event.py
============================================================
Class: PostgresAuditEventRepository

Responsibilities:
  - Persistir eventos de auditoría en PostgreSQL (tabla audit_events).

Collaborators:
  - domain.audit.AuditEvent
  - psycopg.types.json.Json (JSON seguro hacia PostgreSQL)
  - PostgresRepositoryBase

Constraints / Notes:
  - Append-only: no se edita, no se borra.
  - Si falla, se propaga DatabaseError; emit_audit_event lo traga (best-effort).
============================================================
"""

from __future__ import annotations

from psycopg.types.json import Json

from ....domain.audit import AuditEvent
from ._base import PostgresRepositoryBase


class PostgresAuditEventRepository(PostgresRepositoryBase):
    """Audit Sink sobre PostgreSQL."""

    def record_event(self, event: AuditEvent) -> None:
        self._fetchone(
            query="""
                INSERT INTO audit_events (id, actor, action, outcome, target_id, metadata)
                VALUES (%s, %s, %s, %s, %s, %s)
                RETURNING id
            """,
            params=(
                event.id,
                event.actor,
                event.action,
                event.outcome.value,
                str(event.target_id) if event.target_id is not None else None,
                Json(event.metadata or {}),
            ),
            log_msg="PostgresAuditEventRepository: Failed to record audit event",
            log_extra={"event_id": str(event.id), "action": event.action},
        )
