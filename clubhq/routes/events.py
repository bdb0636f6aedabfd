"""
ClubHQ Real-time Events
Server-Sent Events stream and WebSocket channel for moderation notifications
"""
from fastapi import APIRouter, Depends, Request, WebSocket
from fastapi.responses import StreamingResponse
from sqlalchemy.orm import Session
from typing import AsyncGenerator, Optional
import asyncio
import contextlib
import uuid

from ..auth import get_moderator, get_user_from_token
from ..config import get_settings
from ..database import get_db
from ..errors import AuthenticationError
from ..logging_config import events_logger
from ..models.user import User
from ..notifications import EventManager, event_manager

settings = get_settings()

router = APIRouter(prefix="/api/events", tags=["events"])
ws_router = APIRouter(tags=["events"])

# WebSocket close code for policy violations (missing or bad credentials)
WS_POLICY_VIOLATION = 1008


def _new_client_id() -> str:
    return f"client_{uuid.uuid4().hex[:8]}"


# ============================================================
# SSE ROUTES
# ============================================================

async def event_stream(
    request: Request,
    client_id: str,
    keepalive: Optional[float] = None,
    manager: Optional[EventManager] = None,
) -> AsyncGenerator:
    """Generator for SSE stream"""
    manager = manager or event_manager
    keepalive = keepalive or settings.sse_keepalive_seconds
    queue = await manager.connect(client_id)

    try:
        while True:
            # Check if client disconnected
            if await request.is_disconnected():
                break

            try:
                # Wait for events with timeout (for keepalive)
                event = await asyncio.wait_for(queue.get(), timeout=keepalive)
                yield event.to_sse()
            except asyncio.TimeoutError:
                # Send keepalive comment
                yield ": keepalive\n\n"

    finally:
        manager.disconnect(client_id)


@router.get("/stream")
async def sse_stream(request: Request, token: Optional[str] = None, db: Session = Depends(get_db)):
    """
    SSE endpoint for moderation notifications.

    Browsers cannot set headers on an EventSource, so the access token is
    passed as a query parameter.

    Example:
    ```
    const source = new EventSource(`/api/events/stream?token=${accessToken}`);
    source.addEventListener('approval', (event) => {
        const data = JSON.parse(event.data);
        console.log(data.recordKind, data.recordId);
    });
    ```
    """
    user = get_user_from_token(token, db)
    if user is None:
        raise AuthenticationError("A valid access token is required")

    client_id = _new_client_id()
    events_logger.debug("SSE stream opened", client_id=client_id, user_id=user.id)

    return StreamingResponse(
        event_stream(request, client_id),
        media_type="text/event-stream",
        headers={
            "Cache-Control": "no-cache",
            "Connection": "keep-alive",
            "X-Accel-Buffering": "no",  # Disable nginx buffering
        }
    )


@router.get("/status")
def events_status(current_user: User = Depends(get_moderator)):
    """Get current event system status"""
    return {
        "ok": True,
        "connected_clients": event_manager.client_count,
    }


# ============================================================
# WEBSOCKET ROUTE
# ============================================================

async def _pump(websocket: WebSocket, queue: asyncio.Queue):
    while True:
        event = await queue.get()
        await websocket.send_json(event.to_dict())


async def _stop_sender(sender: asyncio.Task):
    """Cancel the pump and collect its outcome, including a send on a closed socket."""
    sender.cancel()
    with contextlib.suppress(asyncio.CancelledError, Exception):
        await sender


@ws_router.websocket("/ws")
async def websocket_endpoint(websocket: WebSocket, token: Optional[str] = None, db: Session = Depends(get_db)):
    """WebSocket channel carrying the same events as the SSE stream."""
    user = get_user_from_token(token, db)
    if user is None:
        await websocket.close(code=WS_POLICY_VIOLATION)
        return

    await websocket.accept()
    client_id = _new_client_id()
    queue = await event_manager.connect(client_id)
    sender = asyncio.create_task(_pump(websocket, queue))
    events_logger.debug("WebSocket opened", client_id=client_id, user_id=user.id)

    try:
        # Incoming messages are ignored; the loop only watches for disconnects
        while True:
            message = await websocket.receive()
            if message["type"] == "websocket.disconnect":
                break
    finally:
        await _stop_sender(sender)
        event_manager.disconnect(client_id)
