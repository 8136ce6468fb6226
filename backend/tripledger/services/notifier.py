"""
Change notifier: persisted notifications plus best-effort live updates.

``TripUpdateHub`` keeps the in-memory registry of live-update listeners for
this process. Each listener owns a bounded FIFO queue, so messages published
for a trip reach every connected listener in publish order. Listeners that
disconnect simply miss messages; nothing is replayed.
"""
import asyncio
import logging
from typing import Any, Dict, List, Optional, Set, Tuple

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from tripledger.core.config import settings
from tripledger.core.exceptions import NotFound
from tripledger.models.notification import Notification
from tripledger.models.trip import TripMember

logger = logging.getLogger(__name__)


def _running_loop() -> Optional[asyncio.AbstractEventLoop]:
    try:
        return asyncio.get_running_loop()
    except RuntimeError:
        return None


class Subscription:
    """Handle for one connected listener of a trip."""

    def __init__(self, trip_id: int, maxsize: int):
        self.trip_id = trip_id
        self.queue: asyncio.Queue = asyncio.Queue(maxsize=maxsize)
        self._loop = _running_loop()

    def offer(self, event: Dict[str, Any]) -> None:
        """Queue an event for this listener without blocking the publisher."""
        current = _running_loop()
        if self._loop is None or current is self._loop:
            self._put(event)
            return
        # Publisher runs on another loop or thread; hand over to the listener's loop.
        try:
            self._loop.call_soon_threadsafe(self._put, event)
        except RuntimeError:
            logger.warning(f"Listener loop for trip {self.trip_id} is closed, dropping event")

    def _put(self, event: Dict[str, Any]) -> None:
        try:
            self.queue.put_nowait(event)
        except asyncio.QueueFull:
            logger.warning(
                f"Live-update queue full for a listener of trip {self.trip_id}, "
                f"dropping '{event.get('type')}' event"
            )


class TripUpdateHub:
    """Process-scoped registry of live-update listeners keyed by trip id."""

    def __init__(self, queue_size: int = None):
        self.queue_size = queue_size or settings.LIVE_UPDATE_QUEUE_SIZE
        self._rooms: Dict[int, Set[Subscription]] = {}

    def subscribe(self, trip_id: int) -> Subscription:
        subscription = Subscription(trip_id, self.queue_size)
        self._rooms.setdefault(trip_id, set()).add(subscription)
        logger.debug(f"Listener subscribed to trip {trip_id} ({self.listener_count(trip_id)} connected)")
        return subscription

    def unsubscribe(self, subscription: Subscription) -> None:
        room = self._rooms.get(subscription.trip_id)
        if not room:
            return
        room.discard(subscription)
        if not room:
            del self._rooms[subscription.trip_id]

    def publish(self, trip_id: int, event: Dict[str, Any]) -> int:
        """Offer ``event`` to every listener of ``trip_id``; returns how many were offered it."""
        listeners = list(self._rooms.get(trip_id, ()))
        for subscription in listeners:
            subscription.offer(event)
        return len(listeners)

    def listener_count(self, trip_id: int) -> int:
        return len(self._rooms.get(trip_id, ()))


def notify_members(
    trip_id: int,
    type: str,
    title: str,
    message: str,
    db: Session,
    hub: TripUpdateHub,
    event: Optional[Dict[str, Any]] = None,
    personal: Optional[Dict[int, Tuple[str, str]]] = None,
) -> None:
    """
    Create one notification per current trip member and publish a live update.

    Failures are logged and swallowed: the ledger change that triggered the
    notification has already been committed and stays in place. ``event``
    replaces the default ``{type, title, message}`` live-update envelope.
    ``personal`` maps a user id to the ``(title, message)`` that user gets
    instead of the shared one.
    """
    personal = personal or {}
    try:
        members = db.query(TripMember).filter(TripMember.trip_id == trip_id).all()
        for member in members:
            member_title, member_message = personal.get(member.user_id, (title, message))
            db.add(Notification(
                trip_id=trip_id,
                user_id=member.user_id,
                type=type,
                title=member_title,
                message=member_message,
            ))
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.error(f"Failed to store '{type}' notifications for trip {trip_id}", exc_info=True)

    hub.publish(trip_id, event or {"type": type, "title": title, "message": message})


def list_notifications(user_id: int, db: Session) -> List[Notification]:
    """Latest notifications for a user, newest first."""
    return db.query(Notification).filter(
        Notification.user_id == user_id
    ).order_by(
        Notification.created_at.desc(), Notification.id.desc()
    ).limit(settings.NOTIFICATION_LIST_LIMIT).all()


def mark_read(notification_id: int, user_id: int, db: Session) -> Notification:
    """Mark one of the user's notifications as read."""
    notification = db.query(Notification).filter(
        Notification.id == notification_id,
        Notification.user_id == user_id
    ).first()
    if not notification:
        raise NotFound("Notification not found")

    notification.read = True
    db.commit()
    db.refresh(notification)
    return notification
