"""
FastAPI application bootstrap with: \n
- Real-time services (hub, presence, chat fan-out) created once per app and stored on `app.state` \n
- Lifespan-managed schema creation and deadline checker task \n
- CORS configured for the frontend \n
- Central error handlers producing the response envelope \n
- Authenticated WebSocket endpoint (`/ws`) \n

Environment contract (from `settings`): \n
- INIT_MODE: if 'runtime', create missing tables and start the deadline checker during startup. \n
- DEADLINE_CHECK_INTERVAL_SECONDS: delay between two deadline sweeps. \n
- FRONTEND_URL: allowed CORS origin. \n
"""

import asyncio
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException

from teamhub.api import chat_api, fast_api, project_api
from teamhub.api.aws_bucket_funcs.funcs import SpacesUploader
from teamhub.api.response import send_response
from teamhub.database import entities  # noqa: F401  registers every table on the metadata
from teamhub.database.config.config import settings
from teamhub.database.config.connection_engine import connection_engine, metadata
from teamhub.realtime.deadlines import run_deadline_checker
from teamhub.realtime.fanout import ChatFanout
from teamhub.realtime.gateway import websocket_endpoint
from teamhub.realtime.hub import RealtimeHub
from teamhub.realtime.presence import PresenceBroadcaster

logger = logging.getLogger("uvicorn")
"""Logger instance for capturing and emitting Uvicorn server logs."""


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    App lifespan manager.

    Notes
    ------------
    - On startup (before yielding):
        * If INIT_MODE == 'runtime':
            - Create missing tables.
            - Start the deadline checker as a background task.
    - On shutdown (after yielding):
        * Cancel the deadline checker if it was started.
    """
    task = None
    if settings.INIT_MODE == "runtime":
        metadata.create_all(connection_engine)
        task = asyncio.create_task(run_deadline_checker(app.state.hub, settings.DEADLINE_CHECK_INTERVAL_SECONDS))
        logger.info("Deadline checker started (every %ss).", settings.DEADLINE_CHECK_INTERVAL_SECONDS)
    else:
        logger.info("Skipping runtime init (INIT_MODE=%s).", settings.INIT_MODE)

    try:
        yield
    finally:
        if task is not None:
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass
            logger.info("Deadline checker stopped.")


async def http_error_handler(request: Request, exc: HTTPException):
    return send_response(None, str(exc.detail), exc.status_code)


async def validation_error_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    message = errors[0]["msg"] if errors else "Invalid request"
    return send_response(None, message, 400, meta={"errors": [e.get("loc") for e in errors]})


async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return send_response(None, "Something went wrong", 500)


def create_app(uploader=None) -> FastAPI:
    """
    Build the application.

    Parameters
    ----------
    uploader : optional
        Image uploader used by the chat fan-out; defaults to `SpacesUploader`.
        Tests pass an in-memory fake.
    """
    app = FastAPI(title="TeamHub", lifespan=lifespan)

    hub = RealtimeHub()
    app.state.hub = hub
    app.state.presence = PresenceBroadcaster(hub)
    app.state.chat = ChatFanout(hub, uploader or SpacesUploader())

    # -----------------------
    # CORS configuration
    # -----------------------
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.FRONTEND_URL],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # -----------------------
    # Errors
    # -----------------------
    app.add_exception_handler(HTTPException, http_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)

    # -----------------------
    # Routes
    # -----------------------
    app.include_router(fast_api.router)
    app.include_router(chat_api.router)
    app.include_router(project_api.router)
    app.add_api_websocket_route("/ws", websocket_endpoint)

    return app


app = create_app()
"""Application instance served by uvicorn (`uvicorn teamhub.main:app`)."""
