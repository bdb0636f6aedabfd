"""
ClubHQ Live Notifications
Fan-out of moderation decisions to every connected dashboard session
"""
import asyncio
import json
import threading
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, Optional

from .logging_config import events_logger


# ============================================================
# EVENT TYPES
# ============================================================

@dataclass
class Event:
    """Notification event pushed to connected clients"""
    type: str
    data: Dict = field(default_factory=dict)
    id: str = ""
    timestamp: str = ""

    def __post_init__(self):
        if not self.id:
            self.id = f"evt_{uuid.uuid4().hex[:8]}"
        if not self.timestamp:
            self.timestamp = datetime.utcnow().isoformat() + "Z"

    def to_dict(self) -> Dict:
        return {
            "id": self.id,
            "type": self.type,
            "timestamp": self.timestamp,
            **self.data,
        }

    def to_sse(self) -> str:
        """Format as SSE message"""
        return f"id: {self.id}\nevent: {self.type}\ndata: {json.dumps(self.to_dict(), default=str)}\n\n"


# ============================================================
# EVENT MANAGER (fan-out)
# ============================================================

@dataclass
class _Client:
    queue: asyncio.Queue
    loop: asyncio.AbstractEventLoop


class EventManager:
    """Tracks live connections and broadcasts events to all of them.

    Each client owns a FIFO queue bound to the event loop it connected on.
    ``broadcast`` may be called from any thread: delivery is scheduled onto
    the client's loop, so synchronous route handlers can publish directly.
    There is no buffering for clients that are not connected.
    """

    def __init__(self):
        self._clients: Dict[str, _Client] = {}
        self._lock = threading.Lock()

    async def connect(self, client_id: str) -> asyncio.Queue:
        """Register a new client and queue its connection confirmation"""
        queue: asyncio.Queue = asyncio.Queue()
        with self._lock:
            self._clients[client_id] = _Client(queue=queue, loop=asyncio.get_running_loop())

        queue.put_nowait(Event(
            type="connected",
            data={"clientId": client_id, "message": "Connected to real-time notifications"},
        ))
        events_logger.info("Client connected", client_id=client_id, clients=self.client_count)
        return queue

    def disconnect(self, client_id: str):
        """Remove a client"""
        with self._lock:
            removed = self._clients.pop(client_id, None)
        if removed is not None:
            events_logger.info("Client disconnected", client_id=client_id, clients=self.client_count)

    def broadcast(self, event: Event) -> int:
        """Send event to every connected client. Returns the number reached."""
        with self._lock:
            clients = list(self._clients.items())

        delivered = 0
        for client_id, client in clients:
            try:
                client.loop.call_soon_threadsafe(client.queue.put_nowait, event)
                delivered += 1
            except RuntimeError as e:
                # Loop already closed: the connection is gone
                events_logger.warning(
                    "Dropping unreachable client",
                    client_id=client_id,
                    event_type=event.type,
                    error_message=str(e),
                )
                self.disconnect(client_id)
        return delivered

    @property
    def client_count(self) -> int:
        with self._lock:
            return len(self._clients)


# Global event manager
event_manager = EventManager()


# ============================================================
# HELPER FUNCTIONS (use from services)
# ============================================================

def emit_moderation_decision(
    event_type: str,
    record_kind: str,
    record_id: int,
    moderator_id: Optional[int] = None,
    manager: Optional[EventManager] = None,
) -> int:
    """Broadcast an approval/rejection after the decision has committed.

    Never raises: a failed broadcast must not undo or fail the decision.
    """
    manager = manager or event_manager
    verb = "approved" if event_type == "approval" else "rejected"
    event = Event(
        type=event_type,
        data={
            "recordKind": record_kind,
            "recordId": record_id,
            "moderatorId": moderator_id,
            "title": f"Content {verb.capitalize()}",
            "message": f"{record_kind.capitalize()} has been {verb}",
        },
    )
    try:
        return manager.broadcast(event)
    except Exception as e:
        events_logger.error(
            "Broadcast failed",
            error=e,
            event_type=event_type,
            record_kind=record_kind,
            record_id=record_id,
        )
        return 0
