from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware

from fuel_dispatch.core.db import init_models
from fuel_dispatch.core.logging import setup_logging
from fuel_dispatch.exceptions import register_exception_handlers
from fuel_dispatch.middleware.rate_limit import custom_rate_limit_exceeded, limiter
from fuel_dispatch.routers import allocation, assignment, fleet, health, metrics

setup_logging()

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    await init_models()
    logger.info("Fuel dispatch API started")
    yield


app = FastAPI(title="Fuel Dispatch API", lifespan=lifespan)

# Register exception handlers
register_exception_handlers(app)

app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, custom_rate_limit_exceeded)
app.add_middleware(SlowAPIMiddleware)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],   # Allows POST, GET, OPTIONS, etc
    allow_headers=["*"],
)

app.include_router(health.router)
app.include_router(metrics.router)
app.include_router(assignment.router)
app.include_router(allocation.router)
app.include_router(fleet.router)


@app.get("/", tags=["root"])
def hello():
    return {"message": "Fuel Dispatch API"}
