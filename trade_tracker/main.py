"""FastAPI application entry point."""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from trade_tracker.config import settings
from trade_tracker.database import create_db_and_tables
from trade_tracker.utils.logging import setup_logging
from trade_tracker.api import sync, system, trades


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events."""
    setup_logging()
    create_db_and_tables()
    # Pull the remote journal before serving, when Gist sync is set up
    from trade_tracker.engine.startup_sync import sync_trades_on_startup
    await sync_trades_on_startup()
    from trade_tracker.engine.scheduler import start_scheduler, stop_scheduler
    start_scheduler()

    yield

    stop_scheduler()


app = FastAPI(
    title="Trade Tracker",
    description="Trade journal with stop-loss tracking and optional Gist sync",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    # The rejected input is not echoed back: it may be a non-finite float JSON cannot carry
    detail = [{"loc": err["loc"], "msg": err["msg"], "type": err["type"]} for err in exc.errors()]
    return JSONResponse(status_code=422, content={"detail": detail})


# Mount routers
app.include_router(trades.router)
app.include_router(sync.router)
app.include_router(system.router)
