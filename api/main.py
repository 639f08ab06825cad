"""
api.main
========

FastAPI application: routers for assets, licenses, history and the
attachment graph, plus the mapping from :mod:`itam.errors` to HTTP
responses.

Run with::

    uvicorn api.main:app --reload
"""

import logging
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from itam import __version__
from itam.db import create_all
from itam.errors import InvalidTransition, PreconditionFailed, SeatAllocationError, ValidationError
from itam.inventory import AssetOperations
from itam.settings import settings

from .deps import get_asset_registry

logging.basicConfig(level=settings.log_level)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    create_all()
    logger.info(f"ITAM API ready on {settings.db_url}")
    yield


app = FastAPI(
    title="ITAM Rules API",
    version=__version__,
    description="HTTP layer over the asset life‑cycle and license accounting registries.",
    lifespan=lifespan,
)

# --- CORS ----------------------------------------------------------
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization", "Accept", "X-Actor-Id"],
)


# --- Error mapping -------------------------------------------------
@app.exception_handler(ValidationError)
async def validation_error_handler(request: Request, exc: ValidationError):
    return JSONResponse(
        status_code=400,
        content={"error": exc.reason, "field": exc.field, "detail": str(exc)},
    )


@app.exception_handler(InvalidTransition)
async def invalid_transition_handler(request: Request, exc: InvalidTransition):
    return JSONResponse(
        status_code=409,
        content={
            "error": exc.reason,
            "from": exc.current.value,
            "to": exc.target.value,
            "detail": str(exc),
        },
    )


@app.exception_handler(PreconditionFailed)
async def precondition_failed_handler(request: Request, exc: PreconditionFailed):
    return JSONResponse(
        status_code=409,
        content={
            "error": exc.reason,
            "condition": exc.condition,
            "from": exc.current.value,
            "to": exc.target.value,
            "detail": str(exc),
        },
    )


@app.exception_handler(SeatAllocationError)
async def seat_allocation_handler(request: Request, exc: SeatAllocationError):
    return JSONResponse(status_code=409, content={"error": exc.reason, "detail": str(exc)})


# --- Include Routers -----------------------------------------------
from .assets import router as assets_router  # noqa: E402
from .history import router as history_router  # noqa: E402
from .licenses import router as licenses_router  # noqa: E402
from .relationships import router as relationships_router  # noqa: E402

app.include_router(assets_router)
app.include_router(licenses_router)
app.include_router(history_router)
app.include_router(relationships_router)


# ---------- health-check ----------
@app.get("/")
def root():
    return {"status": "ok", "msg": "ITAM API is alive"}


# ---------- GET /status ----------
@app.get("/status")
def status_snapshot(reg: AssetOperations = Depends(get_asset_registry)):
    """Asset count per life‑cycle state; every state appears, zeros included."""
    return reg.state_counts()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("api.main:app", host=settings.api_host, port=settings.api_port, reload=settings.api_debug)
