import logging
from datetime import datetime, timezone
from typing import Dict, List, Optional, Union

from sqlalchemy.ext.asyncio import AsyncSession

# Models
from fuel_dispatch.models.client_allocation import ClientAllocation
from fuel_dispatch.models.enums import ALLOCATION_STATUS_ORDER, AllocationStatus, AssignmentStatus

# Metrics / retry
from fuel_dispatch.core.metrics import track_performance
from fuel_dispatch.core.prometheus_metrics import prometheus_collector
from fuel_dispatch.core.retry import async_retry

# Services
from fuel_dispatch.services import queries
from fuel_dispatch.services.reconciliation import (
    AllocationReconciled,
    available_fuel,
    delivery_ceiling,
    find_entry,
    reconcile_assignment,
    summarize_ledger,
)
from fuel_dispatch.services.truck_state import TruckStateSynchronizer
from fuel_dispatch.services.unit_of_work import transaction
from fuel_dispatch.services.validators import BusinessRules

# Exceptions
from fuel_dispatch.services.exceptions import (
    AssignmentAlreadyCompletedError,
    CustomerAlreadyAllocatedError,
    InvalidQuantityError,
    InvalidStateError,
    NotFoundError,
)

logger = logging.getLogger(__name__)


class AllocationService:
    """
    Allocation engine for the client ledger of an assignment.

    This service owns every mutation of client allocations:
    - Creating an allocation bounded by the fuel still available
    - Recording delivery progress and confirmed delivered quantities
    - Deleting allocations that have not started

    Each mutation runs as one transaction: the assignment row is locked, the
    full ledger is re-read under lock, totals and completion are recomputed
    from that ledger, and the truck row is synchronised before commit.
    Transient lock failures are retried from scratch by `async_retry`.
    """

    def __init__(self, db: AsyncSession, synchronizer: Optional[TruckStateSynchronizer] = None):
        """
        Args:
            db (AsyncSession): Active SQLAlchemy async database session
            synchronizer (TruckStateSynchronizer, optional): truck state policy,
                replaceable in tests
        """
        self.db = db
        self.synchronizer = synchronizer or TruckStateSynchronizer()

    def now(self) -> datetime:
        return datetime.now(timezone.utc)

    @track_performance(service_name="AllocationService")
    async def list_allocations(self, assignment_id: int) -> List[ClientAllocation]:
        """Returns the ledger of an assignment with customers loaded."""
        await queries.get_assignment(self.db, assignment_id)
        return await queries.list_ledger_with_customers(self.db, assignment_id)

    @track_performance(service_name="AllocationService")
    @async_retry(max_attempts=3)
    async def create_allocation(
        self,
        assignment_id: int,
        customer_id: int,
        allocated_quantity: float,
    ) -> ClientAllocation:
        """
        Cuts a new pending portion for a customer out of an assignment's load.

        Args:
            assignment_id (int): assignment the fuel comes from
            customer_id (int): customer receiving the portion
            allocated_quantity (float): gallons reserved for the customer

        Returns:
            ClientAllocation: the persisted pending entry

        Raises:
            NotFoundError: assignment or customer missing
            AssignmentAlreadyCompletedError: the assignment's ledger is closed
            CustomerAlreadyAllocatedError: the customer already has an entry
            InvalidQuantityError: quantity not positive or above available fuel
        """
        async with transaction(self.db, f"Allocation on assignment {assignment_id}"):
            assignment = await queries.lock_assignment(self.db, assignment_id)
            if assignment.is_completed:
                raise AssignmentAlreadyCompletedError(
                    f"Assignment {assignment_id} is already completed; a new assignment is required."
                )

            await queries.get_customer(self.db, customer_id)

            ledger = await queries.load_ledger(self.db, assignment_id)
            if any(entry.customer_id == customer_id for entry in ledger):
                raise CustomerAlreadyAllocatedError(
                    f"Customer {customer_id} is already assigned to assignment {assignment_id}."
                )

            available = available_fuel(assignment.total_loaded, ledger)
            BusinessRules.validate_allocated_quantity(allocated_quantity, available)

            entry = ClientAllocation(
                assignment_id=assignment_id,
                customer_id=customer_id,
                allocated_quantity=float(allocated_quantity),
                delivered_quantity=0.0,
                status=AllocationStatus.PENDING,
            )
            self.db.add(entry)
            await self.db.flush()
            await self.db.refresh(entry)

        logger.info(
            f"Allocated {allocated_quantity:g} gal to customer {customer_id}",
            extra={"assignment_id": assignment_id, "client_allocation_id": entry.id, "available_before": available},
        )
        return entry

    @track_performance(service_name="AllocationService", include_metadata=True)
    @async_retry(max_attempts=3)
    async def update_allocation_status(
        self,
        assignment_id: int,
        client_allocation_id: int,
        status: Union[AllocationStatus, str],
        delivered_quantity: Optional[float] = None,
        meter_start: Optional[float] = None,
        meter_end: Optional[float] = None,
    ) -> Dict:
        """
        Advances a ledger entry and reconciles the assignment and its truck.

        Delivered quantity is only recorded when the entry is completed; it
        defaults to the allocated quantity. Re-applying the same update yields
        the same totals and truck state.

        Returns:
            dict: {"client_allocation", "total_remaining",
                   "assignment_completed", "pending_deliveries"}

        Raises:
            NotFoundError: entry missing or owned by another assignment
            InvalidStateError: unknown status or status regression
            InvalidQuantityError: delivered quantity or meter readings invalid
        """
        new_status = self._parse_status(status)
        BusinessRules.validate_meter_readings(meter_start, meter_end)

        async with transaction(self.db, f"Delivery update on assignment {assignment_id}"):
            assignment = await queries.lock_assignment(self.db, assignment_id)
            ledger = await queries.load_ledger(self.db, assignment_id)

            entry = find_entry(ledger, client_allocation_id)
            if entry is None:
                raise NotFoundError(
                    f"Client allocation {client_allocation_id} does not belong to assignment {assignment_id}."
                )

            current = AllocationStatus(entry.status)
            if ALLOCATION_STATUS_ORDER[new_status] < ALLOCATION_STATUS_ORDER[current]:
                raise InvalidStateError(
                    f"Cannot move a delivery from '{current.value}' back to '{new_status.value}'."
                )

            if new_status is AllocationStatus.COMPLETED:
                delivered = float(entry.allocated_quantity if delivered_quantity is None else delivered_quantity)
                others = [e for e in ledger if e.id != entry.id]
                BusinessRules.validate_delivered_quantity(
                    delivered, delivery_ceiling(assignment.total_loaded, others)
                )
                entry.completed_at = entry.completed_at if current is AllocationStatus.COMPLETED else self.now()
            else:
                if delivered_quantity:
                    raise InvalidQuantityError(
                        "Delivered quantity can only be recorded when completing a delivery."
                    )
                delivered = 0.0
                entry.completed_at = None

            entry.status = new_status
            entry.delivered_quantity = delivered
            if meter_start is not None:
                entry.meter_start = meter_start
            if meter_end is not None:
                entry.meter_end = meter_end
            BusinessRules.validate_meter_readings(entry.meter_start, entry.meter_end)

            event = await self._reconcile(assignment, ledger)

        self._publish(event)
        return {
            "client_allocation": entry,
            "total_remaining": event.total_remaining,
            "assignment_completed": event.status is AssignmentStatus.COMPLETED,
            "pending_deliveries": event.pending_deliveries,
        }

    @track_performance(service_name="AllocationService", include_metadata=True)
    @async_retry(max_attempts=3)
    async def delete_allocation(self, assignment_id: int, client_allocation_id: int) -> Dict:
        """
        Removes a pending ledger entry and reconciles the assignment and truck.

        Callers must have checked the delete privilege before reaching here.
        When the ledger becomes empty the truck returns to Active carrying the
        whole load.

        Returns:
            dict: {"total_remaining", "assignment_completed", "pending_deliveries"}

        Raises:
            NotFoundError: entry missing or owned by another assignment
            InvalidStateError: entry already in progress or completed
        """
        async with transaction(self.db, f"Allocation removal on assignment {assignment_id}"):
            assignment = await queries.lock_assignment(self.db, assignment_id)
            ledger = await queries.load_ledger(self.db, assignment_id)

            entry = find_entry(ledger, client_allocation_id)
            if entry is None:
                raise NotFoundError(
                    f"Client allocation {client_allocation_id} does not belong to assignment {assignment_id}."
                )
            if AllocationStatus(entry.status) is not AllocationStatus.PENDING:
                raise InvalidStateError(
                    "Cannot delete an allocation already in progress or completed."
                )

            await self.db.delete(entry)
            await self.db.flush()

            remaining_ledger = [e for e in ledger if e.id != client_allocation_id]
            event = await self._reconcile(assignment, remaining_ledger)

        self._publish(event)
        return {
            "total_remaining": event.total_remaining,
            "assignment_completed": event.status is AssignmentStatus.COMPLETED,
            "pending_deliveries": event.pending_deliveries,
        }

    async def reconcile(self, assignment_id: int) -> AllocationReconciled:
        """
        Recomputes an assignment from its ledger and re-synchronises its truck.

        Used by the fleet refresh pass to repair drift; safe to run any number
        of times. An open assignment with nothing allocated yet still holds
        its truck, so the truck row is left untouched while the ledger is empty.
        """
        async with transaction(self.db, f"Reconciliation of assignment {assignment_id}"):
            assignment = await queries.lock_assignment(self.db, assignment_id)
            ledger = await queries.load_ledger(self.db, assignment_id)
            if summarize_ledger(assignment.total_loaded, ledger).is_empty:
                event = reconcile_assignment(assignment, ledger, self.now())
                await self.db.flush()
            else:
                event = await self._reconcile(assignment, ledger)

        self._publish(event)
        return event

    async def _reconcile(self, assignment, ledger: List[ClientAllocation]) -> AllocationReconciled:
        """Recompute totals from `ledger`, then hand the result to the truck synchronizer. Caller owns the transaction."""
        event = reconcile_assignment(assignment, ledger, self.now())
        truck = await queries.lock_truck(self.db, assignment.truck_id)
        self.synchronizer.apply(truck, event)
        await self.db.flush()
        return event

    def _publish(self, event: AllocationReconciled):
        if event.newly_completed:
            prometheus_collector.record_assignment_completed()
        logger.info("Allocation reconciled", extra=event.as_log_extra())

    @staticmethod
    def _parse_status(status: Union[AllocationStatus, str]) -> AllocationStatus:
        try:
            return AllocationStatus(status)
        except ValueError:
            raise InvalidStateError(
                f"Unknown allocation status '{status}'. Expected one of: "
                + ", ".join(s.value for s in AllocationStatus)
            )
