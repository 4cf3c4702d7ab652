"""
FastAPI application bootstrap with: \n
- Lifespan-managed schema creation and completion client \n
- CORS configured for the frontend \n
- One exception handler turning service errors into `{"detail": ...}` \n
- Authenticated WebSocket endpoints for the support realtime channels (cookie-based token) \n
- Static file serving for the built frontend, when present \n
- Catch-all route to support React Router \n

Environment contract (from `settings`): \n
- FRONTEND_URL: allowed CORS origin. \n
"""

from fastapi import FastAPI, WebSocket, Cookie, WebSocketDisconnect, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from fastapi.responses import FileResponse, JSONResponse
from fastapi.concurrency import run_in_threadpool
from uuid import UUID
import asyncio
import os
import logging
from contextlib import asynccontextmanager

from saver_backend.api.fast_api import router
from saver_backend.api.admin_api import admin_router
from saver_backend.api.dependencies import lookup_identity, lookup_status
from saver_backend.api.prompt_utilities import CompletionClient
from saver_backend.api.change_feed import change_feed, SUPPORT_TOPIC, support_chat_topic
from saver_backend.database.config.config import settings
from saver_backend.database.config.connection_engine import create_schema
from saver_backend.database.core.support_funcs import get_support_chat
from saver_backend.relay.access import is_admin
from saver_backend.relay.errors import SaverError, UpstreamError
from saver_backend.relay.session_resolver import TokenSessionResolver

FRONTEND_DIST = os.path.join("frontend", "dist")

logger = logging.getLogger("uvicorn")
"""Logger instance for capturing and emitting Uvicorn server logs."""


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    App lifespan manager.

    Notes
    ------------
    - On startup (before yielding):
        * Create missing tables.
        * Build the completion client and attach it to `app.state`.
    - On shutdown (after yielding): nothing to release; logged only.
    """
    logger.info("Creating database schema (if missing)...")
    create_schema()
    if getattr(app.state, "completion_client", None) is None:
        app.state.completion_client = CompletionClient()
    logger.info("Startup complete.")
    try:
        yield
    finally:
        logger.info("App shutting down.")


# Instantiate the FastAPI app with lifespan handler
app = FastAPI(lifespan=lifespan)
"""Instantiates a FastAPI application object
    The lifespan=lifespan argument registers the startup/shutdown manager that
    creates the schema and the completion client.
"""

# -----------------------
# CORS configuration
# -----------------------
url = settings.FRONTEND_URL
"""The allowed frontend origin (URL) used for CORS configuration."""

app.add_middleware(
    CORSMiddleware,
    allow_origins=[url],      # Frontend origin
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(SaverError)
async def saver_error_handler(request: Request, exc: SaverError):
    """Typed service errors → `{"detail": ...}` with the error's status code."""
    if isinstance(exc, UpstreamError):
        logger.error(f"{request.method} {request.url.path}: {exc.detail}")
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})


# -----------------------
# API routes
# -----------------------
app.include_router(router)
app.include_router(admin_router)


# -----------------------
# Realtime (support)
# -----------------------
async def _wait_for_disconnect(websocket: WebSocket) -> None:
    while True:
        message = await websocket.receive()
        if message["type"] == "websocket.disconnect":
            return


async def _stream(websocket: WebSocket, topic: str) -> None:
    """
    Forward events of `topic` to the socket until the client goes away.

    The socket is read next to the queue: a disconnect ends the stream and
    releases the subscription whether or not an event is pending.
    """
    queue = change_feed.subscribe(topic)
    listener = asyncio.create_task(_wait_for_disconnect(websocket))
    getter = None
    try:
        await websocket.send_json({"type": "subscribed", "topic": topic})
        while True:
            getter = asyncio.create_task(queue.get())
            done, _ = await asyncio.wait({getter, listener}, return_when=asyncio.FIRST_COMPLETED)
            if listener in done:
                break
            await websocket.send_json(getter.result())
        logger.info(f"Subscriber of {topic} disconnected")
    except WebSocketDisconnect:
        logger.info(f"Subscriber of {topic} disconnected")
    finally:
        for task in (getter, listener):
            if task is not None and not task.done():
                task.cancel()
        change_feed.unsubscribe(topic, queue)


async def _current_identity(token: str | None):
    return await run_in_threadpool(TokenSessionResolver(token, lookup_identity).current_identity)


@app.websocket("/ws/support")
async def support_inbox_feed(websocket: WebSocket, token: str = Cookie(None)):
    """
    Admin inbox feed: support chats opened, closed or written to.

    The first frame is ``{"type": "subscribed", "topic": "support"}``.

    Close Codes
    -----------
    - 1008: Policy Violation (no valid session, or caller is not an admin).
    """
    await websocket.accept()
    identity = await _current_identity(token)
    if identity is None or not is_admin(await run_in_threadpool(lookup_status, identity.user_id)):
        await websocket.close(code=1008)
        return
    await _stream(websocket, SUPPORT_TOPIC)


@app.websocket("/ws/support/{chat_id}")
async def support_chat_feed(websocket: WebSocket, chat_id: UUID, token: str = Cookie(None)):
    """
    New messages of one support chat, for its owner or an admin.

    Close Codes
    -----------
    - 1008: Policy Violation (no valid session, or chat not readable by the caller).
    """
    await websocket.accept()
    identity = await _current_identity(token)
    if identity is None:
        await websocket.close(code=1008)
        return
    try:
        status = await run_in_threadpool(lookup_status, identity.user_id)
        await run_in_threadpool(
            get_support_chat,
            user_id=identity.user_id,
            chat_id=chat_id,
            as_admin=is_admin(status),
        )
    except SaverError:
        await websocket.close(code=1008)
        return
    await _stream(websocket, support_chat_topic(chat_id))


# -----------------------
# Static assets (built frontend)
# -----------------------
if os.path.isdir(FRONTEND_DIST):
    app.mount("/assets", StaticFiles(directory=os.path.join(FRONTEND_DIST, "assets")), name="static")

    # Catch-all route for React Router (must come after all API routes)
    @app.get("/")
    @app.get("/{full_path:path}")
    async def serve_react_app(full_path: str = ""):
        """
        Serve the frontend's index.html for all non-API routes to support client-side routing.
        """
        return FileResponse(os.path.join(FRONTEND_DIST, "index.html"))
