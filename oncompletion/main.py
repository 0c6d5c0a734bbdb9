"""oncompletion - follow-up actions for tasks that have just been completed."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from oncompletion import __version__
from oncompletion.core.config import settings
from oncompletion.core.document_store import FileSystemDocumentStore
from oncompletion.core.errors import CompletionError
from oncompletion.core.events import EventBus
from oncompletion.core.logging import configure_logfire, instrument_fastapi
from oncompletion.interface.api import router as actions_router
from oncompletion.modules.completion.dispatcher import ActionDispatcher
from oncompletion.modules.completion.executors import build_executor_table


logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan context manager."""
    # Startup
    configure_logfire()

    if not settings.library_path.is_dir():
        logger.warning("startup_validation", extra={"library_path": str(settings.library_path), "status": "missing"})

    store = FileSystemDocumentStore(settings.library_path)
    # An embedding application installs its task index before startup
    task_store = getattr(app.state, "task_store", None)
    if task_store is None:
        logger.warning("startup_validation", extra={"task_store": "missing", "affected_actions": "complete"})

    event_bus = EventBus()
    dispatcher = ActionDispatcher(
        executors=build_executor_table(),
        store=store,
        settings=settings,
        task_store=task_store,
        logger=logging.getLogger("oncompletion.dispatcher"),
    )
    dispatcher.attach(event_bus)

    app.state.event_bus = event_bus
    app.state.dispatcher = dispatcher
    logger.info("Completion engine ready", extra={"library_path": str(settings.library_path)})
    yield
    # Shutdown
    dispatcher.detach()


app = FastAPI(
    title="oncompletion",
    description="Follow-up actions for completed markdown and board tasks",
    version=__version__,
    lifespan=lifespan,
)

# Instrument FastAPI with Logfire
instrument_fastapi(app)

# Register routers
app.include_router(actions_router)


@app.exception_handler(CompletionError)
async def completion_error_handler(_request: Request, exc: CompletionError) -> JSONResponse:
    """Map engine errors that reach the HTTP layer to 400 responses."""
    return JSONResponse(content={"detail": str(exc)}, status_code=400)


@app.get("/health")
async def health_check() -> JSONResponse:
    """Health check endpoint."""
    return JSONResponse(content={"status": "healthy"}, status_code=200)
