"""
Live-update WebSocket: one subscription per trip, server-to-client JSON events.
"""
import asyncio
import logging
from typing import Optional
from fastapi import APIRouter, Depends, Query, WebSocket, WebSocketDisconnect, status
from sqlalchemy.orm import Session
from tripledger.db.session import get_db
from tripledger.services.member_registry import get_member
from tripledger.services.notifier import Subscription, TripUpdateHub
from tripledger.api.dependencies import get_update_hub, resolve_token_user

logger = logging.getLogger(__name__)

router = APIRouter(tags=["live"])


async def _forward_events(websocket: WebSocket, subscription: Subscription):
    while True:
        event = await subscription.queue.get()
        await websocket.send_json(event)


async def _wait_for_disconnect(websocket: WebSocket):
    # Clients are not expected to send anything; reading detects the close.
    while True:
        await websocket.receive_text()


@router.websocket("/ws/{trip_id}")
async def trip_updates(
    websocket: WebSocket,
    trip_id: int,
    token: Optional[str] = Query(default=None),
    db: Session = Depends(get_db),
    hub: TripUpdateHub = Depends(get_update_hub)
):
    """Stream live-update events for a trip to one of its members."""
    user = resolve_token_user(token, db)
    allowed = user is not None and get_member(trip_id, user.id, db) is not None
    db.close()
    if not allowed:
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    # Subscribe before accepting so nothing published after the handshake is missed.
    subscription = hub.subscribe(trip_id)
    tasks = []
    try:
        await websocket.accept()
        logger.info(f"User {user.id} connected to live updates for trip {trip_id}")
        tasks = [
            asyncio.create_task(_forward_events(websocket, subscription)),
            asyncio.create_task(_wait_for_disconnect(websocket)),
        ]
        done, pending = await asyncio.wait(tasks, return_when=asyncio.FIRST_COMPLETED)
        for task in done:
            error = task.exception()
            if error and not isinstance(error, WebSocketDisconnect):
                logger.error(f"Live update stream for trip {trip_id} failed: {error}")
    finally:
        for task in tasks:
            task.cancel()
        hub.unsubscribe(subscription)
        logger.info(f"User {user.id} disconnected from live updates for trip {trip_id}")
