"""
CRC — domain/repositories.py

Name
- Domain Repository Interfaces (Protocols)

Responsibilities
- Define persistence contracts for the Credential Store, the Transaction store
  and the Audit Sink (ports).
- Keep application/domain independent from infrastructure (PostgreSQL, in-memory).
- Enable dependency inversion and straightforward unit testing.

Collaborators
- identity.employees: Employee
- domain.entities: Transaction, TransactionStatus, StatusTransitionFields
- domain.audit: AuditEvent
- infrastructure.repositories: postgres/*, in_memory/* implementations

Constraints
- Pure interfaces only: no side effects, no infrastructure imports, no SQL.
- Mutating methods are atomic per row (counter increments, compare-and-swap).
- transition_many is all-or-nothing.

Notes
- We use typing.Protocol for structural subtyping ("duck typing").
"""

from datetime import datetime
from decimal import Decimal
from typing import Dict, List, Optional, Protocol, Sequence, Tuple
from uuid import UUID

from ..identity.employees import Employee
from .audit import AuditEvent
from .entities import StatusTransitionFields, Transaction, TransactionStatus


class EmployeeRepository(Protocol):
    """
    R: Interface for the Credential Store.

    Implementations must provide:
      - Lookup by (username, employee_id) restricted to active employees
      - Linearizable failed-login increments (no lost updates under bursts)
    """

    def find_active_by_username_and_employee_id(
        self, username: str, employee_id: str
    ) -> Optional[Employee]:
        """R: Both fields must match the same active record."""
        ...

    def get_by_id(self, employee_pk: UUID) -> Optional[Employee]:
        """R: Fetch by internal id (token subject), active or not."""
        ...

    def ping(self) -> bool:
        """R: Liveness of the backing store (health checks)."""
        ...

    def save(self, employee: Employee) -> Employee:
        """R: Insert or replace an employee record."""
        ...

    def register_failed_login(
        self,
        employee_pk: UUID,
        *,
        now: datetime,
        max_attempts: int,
        lock_until: datetime,
    ) -> Optional[Employee]:
        """
        R: Atomically increment failed_login_attempts.

        Stamps locked_until = lock_until when the post-increment count reaches
        max_attempts and the account is not currently locked at `now`.

        Returns:
            Updated Employee, or None if the record no longer exists.
        """
        ...

    def register_successful_login(
        self, employee_pk: UUID, *, now: datetime
    ) -> Optional[Employee]:
        """R: Reset counter, clear lock, stamp last_login_at."""
        ...


class TransactionRepository(Protocol):
    """
    R: Interface for the Transaction store (status sub-model).

    Status changes are compare-and-swap on the expected prior status.
    """

    def get_transaction(self, transaction_id: UUID) -> Optional[Transaction]:
        ...

    def save_transaction(self, transaction: Transaction) -> Transaction:
        ...

    def update_status(
        self,
        transaction_id: UUID,
        expected: TransactionStatus,
        target: TransactionStatus,
        fields: StatusTransitionFields,
    ) -> Optional[Transaction]:
        """
        R: Apply `target` only if the current status equals `expected`.

        Returns:
            Updated Transaction, or None if it does not exist or the status differed.

        Raises:
            ValueError: (expected -> target) is not an allowed transition.
        """
        ...

    def find_many_by_ids_with_status(
        self, transaction_ids: Sequence[UUID], status: TransactionStatus
    ) -> List[Transaction]:
        """
        R: Transactions among `transaction_ids` whose status equals `status`.

        Read-only lookup for collaborators (settlement, reporting). Batch
        submission does not depend on it: transition_many re-checks status
        inside its own atomic step and reports the offending ids itself.
        """
        ...

    def transition_many(
        self,
        transaction_ids: Sequence[UUID],
        expected: TransactionStatus,
        target: TransactionStatus,
        fields: StatusTransitionFields,
    ) -> Tuple[List[Transaction], List[UUID]]:
        """
        R: All-or-nothing batch transition.

        Returns:
            (updated, offending). When `offending` is non-empty nothing was mutated.

        Raises:
            ValueError: (expected -> target) is not an allowed transition.
        """
        ...

    def count_by_status(self) -> Dict[TransactionStatus, int]:
        ...

    def summarize_created_between(
        self, start: datetime, end: datetime
    ) -> Tuple[int, Decimal]:
        """R: (count, sum(amount)) for created_at in [start, end)."""
        ...


class AuditEventRepository(Protocol):
    """R: Interface for the Audit Sink."""

    def record_event(self, event: AuditEvent) -> None:
        ...
