import logging
from typing import Dict, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from fuel_dispatch.core.metrics import track_performance
from fuel_dispatch.core.prometheus_metrics import prometheus_collector
from fuel_dispatch.core.retry import async_retry
from fuel_dispatch.models.assignment import Assignment
from fuel_dispatch.models.enums import TruckState
from fuel_dispatch.services import queries
from fuel_dispatch.services.allocation_service import AllocationService
from fuel_dispatch.services.exceptions import TruckUnavailableError
from fuel_dispatch.services.reconciliation import summarize_ledger
from fuel_dispatch.services.unit_of_work import transaction
from fuel_dispatch.services.validators import BusinessRules

logger = logging.getLogger(__name__)


class AssignmentService:
    """
    Daily assignment lifecycle around the allocation engine.

    Opens a truck's assignment for the day and runs the fleet-wide
    reconciliation pass that re-derives every dispatchable truck's state
    from its latest ledger.
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    @track_performance(service_name="AssignmentService")
    @async_retry(max_attempts=3)
    async def create_assignment(
        self,
        truck_id: int,
        driver_id: int,
        total_loaded: float,
        notes: Optional[str] = None,
    ) -> Assignment:
        """
        Loads a truck for the day and hands it to a driver.

        The truck must be Active; it becomes Assigned in the same
        transaction. The fuel type is taken from the truck.

        Raises:
            NotFoundError: truck or driver missing
            TruckUnavailableError: truck not Active
            InvalidQuantityError: load not positive or above capacity / dispatch cap
        """
        async with transaction(self.db, f"Assignment of truck {truck_id}"):
            truck = await queries.lock_truck(self.db, truck_id)
            if TruckState(truck.state) is not TruckState.ACTIVE:
                raise TruckUnavailableError(
                    f"Truck {truck.plate} is not available, current state: {TruckState(truck.state).value}."
                )

            await queries.get_driver(self.db, driver_id)
            BusinessRules.validate_total_loaded(total_loaded, truck.capacity_gal)

            assignment = Assignment(
                truck_id=truck.id,
                driver_id=driver_id,
                fuel_type=truck.fuel_type,
                total_loaded=float(total_loaded),
                total_remaining=float(total_loaded),
                is_completed=False,
                notes=notes,
            )
            self.db.add(assignment)

            prometheus_collector.record_truck_transition(TruckState.ACTIVE.value, TruckState.ASSIGNED.value)
            truck.state = TruckState.ASSIGNED

            await self.db.flush()
            await self.db.refresh(assignment)

        logger.info(
            f"Truck {truck.plate} assigned with {total_loaded:g} gal",
            extra={"assignment_id": assignment.id, "truck_id": truck.id, "driver_id": driver_id},
        )
        return assignment

    @track_performance(service_name="AssignmentService", include_metadata=True)
    async def get_assignment(self, assignment_id: int) -> Dict:
        """Assignment with its ledger-derived figures."""
        assignment = await queries.get_assignment(self.db, assignment_id)
        ledger = await queries.list_ledger_with_customers(self.db, assignment_id)
        summary = summarize_ledger(assignment.total_loaded, ledger)
        return {
            "assignment": assignment,
            "client_allocations": ledger,
            "available": summary.available,
            "pending_deliveries": summary.pending_deliveries,
        }

    @track_performance(service_name="AssignmentService", include_metadata=True)
    async def refresh_truck_status(self) -> Dict:
        """
        Re-runs reconciliation for the latest assignment of every Active or
        Assigned truck.

        Each truck is reconciled and committed in its own transaction.
        Trucks in maintenance, transit or unloading are left alone.

        Returns:
            dict: {"updated_count": int, "checked_count": int}
        """
        engine = AllocationService(self.db)
        truck_ids = await queries.dispatchable_truck_ids(self.db)
        updated = 0

        for truck_id in truck_ids:
            assignment = await queries.latest_assignment_for_truck(self.db, truck_id)
            if assignment is None:
                continue

            truck = await queries.get_truck(self.db, truck_id)
            before = (
                TruckState(truck.state),
                truck.last_remaining,
                assignment.is_completed,
                assignment.total_remaining,
            )

            await engine.reconcile(assignment.id)
            after = (
                TruckState(truck.state),
                truck.last_remaining,
                assignment.is_completed,
                assignment.total_remaining,
            )

            if before != after:
                updated += 1
                logger.info(
                    f"Truck {truck.plate} reconciled",
                    extra={"truck_id": truck_id, "assignment_id": assignment.id, "before": str(before), "after": str(after)},
                )

        logger.info(f"Truck status refresh completed. {updated} trucks updated.")
        return {"updated_count": updated, "checked_count": len(truck_ids)}
