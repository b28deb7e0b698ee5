from slowapi import Limiter
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded
from fastapi import Request
from fastapi.responses import JSONResponse
from prometheus_client import Counter

from fuel_dispatch.core.environment import get_rate_limit_default, is_rate_limit_enabled
from fuel_dispatch.core.prometheus_metrics import REGISTRY

limiter = Limiter(
    key_func=get_remote_address,
    default_limits=[get_rate_limit_default()],
    enabled=is_rate_limit_enabled(),
)

# Metric for monitoring
rate_limit_exceeded_counter = Counter(
    'fuel_dispatch_rate_limit_exceeded_total',
    'Total rate limit violations',
    ['endpoint', 'user_id'],
    registry=REGISTRY
)

def custom_rate_limit_exceeded(request: Request, exc: RateLimitExceeded):
    user_id = getattr(request.state, 'user_id', None) or 'anonymous'
    rate_limit_exceeded_counter.labels(
        endpoint=request.url.path,
        user_id=user_id
    ).inc()

    return JSONResponse(
        status_code=429,
        content={
            "error": "RateLimitExceeded",
            "message": f"Rate limit exceeded: {exc.detail}. Please try again later.",
        },
    )
