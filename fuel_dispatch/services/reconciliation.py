"""
Ledger reconciliation for a single assignment.

Every aggregate figure of an assignment is recomputed here from the full set
of client allocations on each mutation; nothing is maintained as a running
counter. The functions in this module are pure over anything exposing
`status`, `allocated_quantity` and `delivered_quantity`, which lets them be
tested with plain namespaces as well as ORM rows.

Two notions of "what is left on the truck" exist and are kept distinct:

- remaining: total loaded minus what has been confirmed delivered. This is
  what the assignment persists and what the truck carries into the next day.
- available: total loaded minus what is committed to customers, where a
  completed entry commits its delivered quantity and any other entry commits
  its allocated quantity. New allocations and delivered quantities are
  bounded by this figure, so reservations can never exceed the load.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, Optional

from fuel_dispatch.models.enums import AllocationStatus, AssignmentStatus

QUANTITY_PRECISION = 2


def _is_completed(entry) -> bool:
    return AllocationStatus(entry.status) is AllocationStatus.COMPLETED


def committed_quantity(entry) -> float:
    """Fuel an entry holds against the load: delivered once completed, allocated before."""
    if _is_completed(entry):
        return float(entry.delivered_quantity or 0.0)
    return float(entry.allocated_quantity or 0.0)


def total_delivered(entries: Iterable) -> float:
    return round(
        sum(float(e.delivered_quantity or 0.0) for e in entries if _is_completed(e)),
        QUANTITY_PRECISION,
    )


def available_fuel(total_loaded: float, entries: Iterable) -> float:
    committed = sum(committed_quantity(e) for e in entries)
    return round(max(0.0, float(total_loaded) - committed), QUANTITY_PRECISION)


def completion_status(entries: Iterable) -> AssignmentStatus:
    """Completed iff the ledger is non-empty and every entry is completed."""
    entries = list(entries)
    if entries and all(_is_completed(e) for e in entries):
        return AssignmentStatus.COMPLETED
    return AssignmentStatus.OPEN


def pending_deliveries(entries: Iterable) -> int:
    return sum(1 for e in entries if not _is_completed(e))


@dataclass(frozen=True)
class LedgerSummary:
    total_loaded: float
    total_delivered: float
    total_remaining: float
    available: float
    status: AssignmentStatus
    entry_count: int
    pending_deliveries: int

    @property
    def is_empty(self) -> bool:
        return self.entry_count == 0


def summarize_ledger(total_loaded: float, entries: Iterable) -> LedgerSummary:
    entries = list(entries)
    delivered = total_delivered(entries)
    return LedgerSummary(
        total_loaded=float(total_loaded),
        total_delivered=delivered,
        total_remaining=round(float(total_loaded) - delivered, QUANTITY_PRECISION),
        available=available_fuel(total_loaded, entries),
        status=completion_status(entries),
        entry_count=len(entries),
        pending_deliveries=pending_deliveries(entries),
    )


@dataclass(frozen=True)
class AllocationReconciled:
    """Raised once an assignment's totals have been recomputed from its ledger."""
    assignment_id: int
    truck_id: int
    total_loaded: float
    total_remaining: float
    status: AssignmentStatus
    ledger_size: int
    pending_deliveries: int
    newly_completed: bool
    occurred_at: datetime

    @property
    def ledger_empty(self) -> bool:
        return self.ledger_size == 0

    def as_log_extra(self) -> dict:
        return {
            "assignment_id": self.assignment_id,
            "truck_id": self.truck_id,
            "total_remaining": self.total_remaining,
            "assignment_status": self.status.value,
            "ledger_size": self.ledger_size,
            "pending_deliveries": self.pending_deliveries,
        }


def reconcile_assignment(assignment, entries: Iterable, now: datetime) -> AllocationReconciled:
    """
    Recompute and write back an assignment's remaining fuel and completion.

    `entries` must be the full ledger as it will stand after the current
    mutation. The assignment row is updated in place; the caller owns the
    transaction and is expected to have locked the row.
    """
    summary = summarize_ledger(assignment.total_loaded, entries)
    was_completed = bool(assignment.is_completed)

    assignment.total_remaining = summary.total_remaining
    if summary.status is AssignmentStatus.COMPLETED:
        assignment.is_completed = True
        if not was_completed or assignment.completed_at is None:
            assignment.completed_at = now
    else:
        assignment.is_completed = False
        assignment.completed_at = None

    return AllocationReconciled(
        assignment_id=assignment.id,
        truck_id=assignment.truck_id,
        total_loaded=summary.total_loaded,
        total_remaining=summary.total_remaining,
        status=summary.status,
        ledger_size=summary.entry_count,
        pending_deliveries=summary.pending_deliveries,
        newly_completed=summary.status is AssignmentStatus.COMPLETED and not was_completed,
        occurred_at=now,
    )


def delivery_ceiling(total_loaded: float, other_entries: Iterable) -> float:
    """Most fuel one entry can be confirmed as delivered, given what the rest of the ledger holds."""
    return available_fuel(total_loaded, other_entries)


def find_entry(entries: Iterable, entry_id: int) -> Optional[object]:
    return next((e for e in entries if e.id == entry_id), None)
