"""
WebSocket manager pushing guest data changes to open dashboards
"""

import asyncio
import json
import logging
from typing import Dict, List, Set
from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from app.services.events import GuestEvent, guest_events

logger = logging.getLogger(__name__)

GUESTS_CHANNEL = "guests"

class WebSocketManager:
    """Manages WebSocket connections for real-time updates"""

    def __init__(self):
        # channel -> list of websockets
        self.active_connections: Dict[str, List[WebSocket]] = {}
        # Scheduled broadcasts, held until they finish
        self.pending_broadcasts: Set[asyncio.Task] = set()

    async def connect(self, websocket: WebSocket, channel: str = GUESTS_CHANNEL):
        """Accept WebSocket connection and add it to a channel"""
        await websocket.accept()

        self.active_connections.setdefault(channel, []).append(websocket)
        logger.info(f"WebSocket connected to {channel}. Total connections: {len(self.active_connections[channel])}")

    def disconnect(self, websocket: WebSocket, channel: str = GUESTS_CHANNEL):
        """Remove WebSocket connection from a channel"""
        if channel in self.active_connections:
            try:
                self.active_connections[channel].remove(websocket)
                logger.info(f"WebSocket disconnected from {channel}. Remaining connections: {len(self.active_connections[channel])}")

                # Clean up empty channels
                if not self.active_connections[channel]:
                    del self.active_connections[channel]
            except ValueError:
                # WebSocket was not in the list
                pass

    async def send_personal_message(self, message: dict, websocket: WebSocket):
        """Send message to specific WebSocket"""
        try:
            await websocket.send_text(json.dumps(message))
        except Exception as e:
            logger.error(f"Error sending personal message: {e}")

    async def broadcast(self, message: dict, channel: str = GUESTS_CHANNEL):
        """Broadcast message to all WebSockets on a channel"""
        if channel not in self.active_connections:
            logger.debug(f"No active connections for {channel}")
            return

        # Create list copy to avoid modification during iteration
        connections = self.active_connections[channel].copy()

        disconnected = []
        for websocket in connections:
            try:
                await websocket.send_text(json.dumps(message))
            except Exception as e:
                logger.error(f"Error broadcasting to websocket: {e}")
                disconnected.append(websocket)

        # Clean up disconnected websockets
        for websocket in disconnected:
            self.disconnect(websocket, channel)

    def notify_guest_change(self, event: GuestEvent):
        """Event bus subscriber: schedule a broadcast on the running loop"""
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            # Called outside the server (scripts, tests): nobody to notify
            return
        task = loop.create_task(self.broadcast(event.to_message()))
        self.pending_broadcasts.add(task)
        task.add_done_callback(self.pending_broadcasts.discard)

    def get_connection_count(self, channel: str = GUESTS_CHANNEL) -> int:
        """Get number of active connections for a channel"""
        return len(self.active_connections.get(channel, []))

    def get_all_connection_counts(self) -> Dict[str, int]:
        """Get connection counts for all channels"""
        return {
            channel: len(connections)
            for channel, connections in self.active_connections.items()
        }

# Global WebSocket manager instance
websocket_manager = WebSocketManager()
guest_events.subscribe(websocket_manager.notify_guest_change)

# Router for WebSocket endpoints
router = APIRouter()

@router.websocket("/guests")
async def websocket_endpoint(websocket: WebSocket):
    """WebSocket endpoint for guest list change notifications"""
    await websocket_manager.connect(websocket)

    try:
        welcome_message = {
            "type": "connection",
            "message": "Connected to guest updates",
            "connection_count": websocket_manager.get_connection_count()
        }
        await websocket_manager.send_personal_message(welcome_message, websocket)

        # Keep connection alive and answer heartbeats
        while True:
            data = await websocket.receive_text()
            try:
                client_message = json.loads(data)
            except json.JSONDecodeError:
                logger.warning(f"Invalid JSON received from WebSocket: {data}")
                continue

            if client_message.get("type") == "ping":
                pong_message = {
                    "type": "pong",
                    "timestamp": client_message.get("timestamp")
                }
                await websocket_manager.send_personal_message(pong_message, websocket)

    except WebSocketDisconnect:
        pass
    finally:
        websocket_manager.disconnect(websocket)

@router.get("/stats")
async def websocket_stats():
    """Get WebSocket connection statistics (for debugging)"""
    counts = websocket_manager.get_all_connection_counts()
    return {
        "total_channels_with_connections": len(counts),
        "connection_counts": counts,
        "total_connections": sum(counts.values())
    }
