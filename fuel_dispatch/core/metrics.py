import time
import uuid
import logging
from functools import wraps
from typing import Optional

from fuel_dispatch.core.prometheus_metrics import prometheus_collector

logger = logging.getLogger(__name__)


def _result_summary(result) -> dict:
    """Keys of dict results, so the log shows which figures an operation returned."""
    if isinstance(result, dict):
        return {"result_keys": sorted(result.keys())}
    return {}


def track_performance(
    service_name: Optional[str] = None,
    include_metadata: bool = False
):
    """
    Time an async service method, export it to Prometheus and log one line per call.

    Usage:
        @track_performance(service_name="AllocationService")
        async def create_allocation(self, assignment_id, customer_id, allocated_quantity):
            ...

    The wrapper sits outside `async_retry`, so one entry covers every attempt
    of the call. Exceptions are logged and re-raised unchanged.
    """
    def decorator(func):
        @wraps(func)
        async def wrapper(*args, **kwargs):
            service = service_name or (type(args[0]).__name__ if args else func.__module__)
            call = {
                "correlation_id": str(uuid.uuid4()),
                "service_name": service,
                "method_name": func.__name__,
            }
            started = time.perf_counter()
            success = False
            extra = {}

            try:
                result = await func(*args, **kwargs)
                success = True
                if include_metadata:
                    extra = _result_summary(result)
                return result
            except Exception as e:
                extra = {"error_type": type(e).__name__}
                logger.warning(f"{service}.{func.__name__} failed: {e}", extra=call)
                raise
            finally:
                elapsed = time.perf_counter() - started
                prometheus_collector.record_request(
                    service_name=service,
                    method_name=func.__name__,
                    duration_seconds=elapsed,
                    success=success,
                )
                logger.info(
                    f"Method executed: {service}.{func.__name__}",
                    extra={**call, "duration_ms": round(elapsed * 1000, 2), "success": success, **extra},
                )

        return wrapper
    return decorator
