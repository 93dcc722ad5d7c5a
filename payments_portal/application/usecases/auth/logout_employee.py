"""
===============================================================================
USE CASE: Logout Employee (stateless)
===============================================================================

Class:
    LogoutEmployeeUseCase

Responsibilities:
    - Auditar el logout. El cliente descarta sus tokens; no hay denylist.

Collaborators:
    - emit_audit_event (EMPLOYEE_LOGOUT)
===============================================================================
"""

from __future__ import annotations

from ....audit import emit_audit_event
from ....domain.audit import AuditAction
from ....domain.repositories import AuditEventRepository
from ....identity.employees import EmployeeContext
from .auth_results import LogoutResult


class LogoutEmployeeUseCase:
    def __init__(self, audit_repository: AuditEventRepository | None = None) -> None:
        self._audit = audit_repository

    def execute(self, actor: EmployeeContext) -> LogoutResult:
        emit_audit_event(
            self._audit,
            action=AuditAction.EMPLOYEE_LOGOUT,
            employee=actor,
            target_id=actor.id,
        )
        return LogoutResult(logged_out=True)
