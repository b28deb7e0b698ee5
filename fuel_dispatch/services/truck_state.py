import logging
from dataclasses import dataclass

from fuel_dispatch.core.prometheus_metrics import prometheus_collector
from fuel_dispatch.models.enums import AssignmentStatus, TruckState
from fuel_dispatch.services.reconciliation import AllocationReconciled

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TruckSync:
    state: TruckState
    last_remaining: float


class TruckStateSynchronizer:
    """
    Maps a reconciled assignment onto its truck's operational state.

    The outcome depends only on the event and the truck capacity, so applying
    it again for the same ledger leaves the truck unchanged. Only the
    Active/Assigned pair is ever written; other states belong to other flows.
    """

    @staticmethod
    def resolve(event: AllocationReconciled, capacity_gal: float) -> TruckSync:
        if event.ledger_empty:
            # nothing has been committed against this load
            state, residual = TruckState.ACTIVE, event.total_loaded
        elif event.status is AssignmentStatus.COMPLETED:
            state, residual = TruckState.ACTIVE, event.total_remaining
        else:
            state, residual = TruckState.ASSIGNED, event.total_remaining

        residual = min(max(0.0, float(residual)), float(capacity_gal))
        return TruckSync(state=state, last_remaining=residual)

    def apply(self, truck, event: AllocationReconciled) -> TruckSync:
        sync = self.resolve(event, truck.capacity_gal)
        previous = TruckState(truck.state)

        truck.state = sync.state
        truck.last_remaining = sync.last_remaining

        prometheus_collector.record_truck_transition(previous.value, sync.state.value)
        if previous is not sync.state:
            logger.info(
                f"Truck {truck.plate}: {previous.value} -> {sync.state.value}",
                extra={"truck_id": truck.id, "last_remaining": sync.last_remaining},
            )
        return sync
