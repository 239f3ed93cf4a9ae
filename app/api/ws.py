"""
WebSocket channel for the interactive seating editor.

The canvas sends drag gestures over this socket and receives save status
changes and refreshed arrangements for its tenant.
"""

import asyncio
import json
import logging
from typing import Dict, List, Set

from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect

from app.core.exceptions import SeatingError
from app.services.save_coordinator import SaveStatus
from app.services.seating_session import SeatingSession, SessionRegistry
from app.utils.security import token_is_valid

logger = logging.getLogger(__name__)

class WebSocketManager:
    """Manages WebSocket connections for real-time updates"""

    def __init__(self):
        # tenant_id -> list of websockets
        self.active_connections: Dict[str, List[WebSocket]] = {}

    async def connect(self, websocket: WebSocket, tenant_id: str):
        """Accept WebSocket connection and add to the tenant's room"""
        await websocket.accept()
        self.active_connections.setdefault(tenant_id, []).append(websocket)
        logger.info(f"WebSocket connected for tenant {tenant_id}. Total connections: {len(self.active_connections[tenant_id])}")

    def disconnect(self, websocket: WebSocket, tenant_id: str):
        """Remove WebSocket connection from the tenant's room"""
        connections = self.active_connections.get(tenant_id)
        if not connections or websocket not in connections:
            return
        connections.remove(websocket)
        logger.info(f"WebSocket disconnected for tenant {tenant_id}. Remaining connections: {len(connections)}")
        if not connections:
            del self.active_connections[tenant_id]

    async def send_personal_message(self, message: dict, websocket: WebSocket):
        """Send message to specific WebSocket"""
        try:
            await websocket.send_text(json.dumps(message))
        except Exception as e:
            logger.error(f"Error sending personal message: {e}")

    async def broadcast(self, tenant_id: str, message: dict):
        """Broadcast message to all WebSockets of a tenant"""
        connections = list(self.active_connections.get(tenant_id, []))

        disconnected = []
        for websocket in connections:
            try:
                await websocket.send_text(json.dumps(message))
            except Exception as e:
                logger.error(f"Error broadcasting to websocket: {e}")
                disconnected.append(websocket)

        for websocket in disconnected:
            self.disconnect(websocket, tenant_id)

    def get_connection_count(self, tenant_id: str) -> int:
        return len(self.active_connections.get(tenant_id, []))


websocket_manager = WebSocketManager()

# Broadcasts started from synchronous callbacks, held until they finish
background_tasks: Set[asyncio.Task] = set()


def save_status_notifier(tenant_id: str):
    """Status callback that pushes save status changes to the tenant's sockets"""

    def on_status(event_name: str, status: SaveStatus):
        message = {"type": "save_status", "event": event_name, "status": status.value}
        task = asyncio.get_running_loop().create_task(websocket_manager.broadcast(tenant_id, message))
        background_tasks.add(task)
        task.add_done_callback(background_tasks.discard)

    return on_status


def make_session(tenant_id: str) -> SeatingSession:
    return SeatingSession(tenant_id, on_status=save_status_notifier(tenant_id))


session_registry = SessionRegistry(factory=make_session)


def get_session_registry() -> SessionRegistry:
    return session_registry


async def handle_client_message(session: SeatingSession, message: dict) -> dict:
    """Apply one editor message and build the reply"""
    kind = message.get("type")

    if kind == "ping":
        return {"type": "pong", "timestamp": message.get("timestamp")}

    try:
        if kind == "drag_start":
            session.start_drag(message["guest_id"])
            return {"type": "drag_started", "guest_id": message["guest_id"]}

        if kind == "drag_end":
            session.end_drag()
            return {"type": "drag_ended"}

        if kind == "drop":
            outcome = session.drop(message.get("table_id"), message.get("guest_id"))
            return {"type": "dropped", "outcome": outcome.value, "arrangement": session.snapshot()}

        if kind == "select_event":
            if message["event"] not in {e.name for e in session.events}:
                return {"type": "error", "message": f"Unknown event: {message['event']}"}
            await session.select_event(message["event"], save_current=bool(message.get("save_current")))
            return {"type": "arrangement", "arrangement": session.snapshot()}

    except KeyError as e:
        return {"type": "error", "message": f"Missing field {e}"}
    except SeatingError as e:
        return {"type": "error", "message": str(e)}

    return {"type": "error", "message": f"Unknown message type: {kind}"}


router = APIRouter()

@router.websocket("/seating/{tenant_id}")
async def seating_websocket(
    websocket: WebSocket,
    tenant_id: str,
    token: str = "",
    registry: SessionRegistry = Depends(get_session_registry),
):
    """Drag and drop editing channel for one tenant"""
    if not token_is_valid(token):
        await websocket.close(code=4001, reason="Invalid API token")
        return

    session = registry.get(tenant_id)
    await websocket_manager.connect(websocket, tenant_id)

    try:
        await websocket_manager.send_personal_message(
            {"type": "arrangement", "arrangement": session.snapshot()}, websocket
        )

        while True:
            data = await websocket.receive_text()
            try:
                client_message = json.loads(data)
            except json.JSONDecodeError:
                logger.warning(f"Invalid JSON received from WebSocket: {data}")
                continue

            reply = await handle_client_message(session, client_message)
            await websocket_manager.send_personal_message(reply, websocket)

    except WebSocketDisconnect:
        pass
    finally:
        websocket_manager.disconnect(websocket, tenant_id)
