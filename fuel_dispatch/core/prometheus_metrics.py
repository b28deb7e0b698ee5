from prometheus_client import Counter, Histogram, Info, generate_latest
from prometheus_client.core import CollectorRegistry
import logging

logger = logging.getLogger(__name__)

# Prometheus Registry
REGISTRY = CollectorRegistry()

# Engine Metrics
dispatch_requests_total = Counter(
    'fuel_dispatch_requests_total',
    'Total allocation engine requests',
    ['status', 'service', 'method'],
    registry=REGISTRY
)

dispatch_duration_seconds = Histogram(
    'fuel_dispatch_duration_seconds',
    'Allocation engine request duration in seconds',
    ['service', 'method'],
    buckets=[0.01, 0.05, 0.1, 0.5, 1.0, 2.0, 5.0],
    registry=REGISTRY
)

truck_state_transitions_total = Counter(
    'fuel_dispatch_truck_state_transitions_total',
    'Truck state changes applied by the synchronizer',
    ['from_state', 'to_state'],
    registry=REGISTRY
)

assignments_completed_total = Counter(
    'fuel_dispatch_assignments_completed_total',
    'Assignments whose ledger became fully delivered',
    registry=REGISTRY
)

system_info = Info(
    'fuel_dispatch_info',
    'System information',
    registry=REGISTRY
)


class PrometheusMetricsCollector:
    """Thin facade over the module-level Prometheus instruments"""

    def __init__(self):
        system_info.info({
            'version': '1.0.0',
            'service': 'fuel-dispatch'
        })

    def record_request(
        self,
        service_name: str,
        method_name: str,
        duration_seconds: float,
        success: bool
    ):
        status = 'success' if success else 'error'

        dispatch_requests_total.labels(
            status=status,
            service=service_name,
            method=method_name
        ).inc()

        dispatch_duration_seconds.labels(
            service=service_name,
            method=method_name
        ).observe(duration_seconds)

    def record_truck_transition(self, from_state: str, to_state: str):
        if from_state == to_state:
            return
        truck_state_transitions_total.labels(
            from_state=from_state,
            to_state=to_state
        ).inc()

    def record_assignment_completed(self):
        assignments_completed_total.inc()

    def get_prometheus_metrics(self) -> bytes:
        """Get Prometheus metrics in text format"""
        return generate_latest(REGISTRY)

# Global instance
prometheus_collector = PrometheusMetricsCollector()
