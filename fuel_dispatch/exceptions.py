from fastapi import Request
from fastapi.responses import JSONResponse

from fuel_dispatch.services.exceptions import AllocationDomainError, ConcurrentUpdateError


async def domain_exception_handler(request: Request, exc: AllocationDomainError):
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error": exc.error_code,
            "message": str(exc),
        },
    )


async def concurrent_update_exception_handler(request: Request, exc: ConcurrentUpdateError):
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error": exc.error_code,
            "message": str(exc),
        },
        headers={"Retry-After": "1"},
    )


def register_exception_handlers(app):
    app.add_exception_handler(AllocationDomainError, domain_exception_handler)
    app.add_exception_handler(ConcurrentUpdateError, concurrent_update_exception_handler)
