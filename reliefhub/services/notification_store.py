"""
Notification Store - in-app alerts with read/unread tracking.

DESIGN PRINCIPLES:
- Listing order is always reverse-chronological, whatever the channel
- Channel only drives the urgency hint passed to the AlertDispatcher
- The unread counter is maintained on push/mark_read, never recounted
- A notification that has been read is never marked unread again

CHANNEL URGENCY:
- emergency          -> max
- relief-update      -> high
- volunteer-request  -> default
- achievement        -> low
"""

from datetime import datetime, timezone
from typing import Callable, Dict, List, Optional, Union
import logging
import uuid

from reliefhub.core.errors import DuplicateIdError, InvalidChannelError, NotFoundError
from reliefhub.models.notification import Notification, NotificationChannel, NotificationCreate
from reliefhub.services.collaborators import AlertDispatcher
from reliefhub.services.events import ChangeFeed, Subscriber

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class NotificationStore:
    """
    In-memory alert list.

    Notifications are kept in push order; list() walks that order
    backwards, so equal timestamps still come out newest-first.
    """

    EVENT_SOURCE = "notifications"

    URGENCY_BY_CHANNEL = {
        NotificationChannel.EMERGENCY: "max",
        NotificationChannel.RELIEF_UPDATE: "high",
        NotificationChannel.VOLUNTEER_REQUEST: "default",
        NotificationChannel.ACHIEVEMENT: "low",
    }

    def __init__(
        self,
        dispatcher: Optional[AlertDispatcher] = None,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self._notifications: Dict[str, Notification] = {}
        self._order: List[str] = []
        self._unread = 0
        self._dispatcher = dispatcher
        self._clock = clock
        self.changes = ChangeFeed(self.EVENT_SOURCE)

    @staticmethod
    def parse_channel(channel: Union[NotificationChannel, str]) -> NotificationChannel:
        """
        Resolve a channel value.

        Raises:
            InvalidChannelError: not one of the recognized channels
        """
        if isinstance(channel, NotificationChannel):
            return channel
        try:
            return NotificationChannel(channel)
        except ValueError:
            raise InvalidChannelError(channel)

    @classmethod
    def urgency_for(cls, channel: Union[NotificationChannel, str]) -> str:
        return cls.URGENCY_BY_CHANNEL[cls.parse_channel(channel)]

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def push(self, notification: Union[NotificationCreate, Notification, dict]) -> Notification:
        """
        Append a notification and hand it to the dispatcher.

        Args:
            notification: NotificationCreate payload (a Notification or a
                plain dict are accepted too)

        Returns:
            The stored Notification (always unread)

        Raises:
            InvalidChannelError: unknown channel
            DuplicateIdError: id already present
        """
        if isinstance(notification, dict):
            notification = NotificationCreate(**notification)

        channel = self.parse_channel(notification.channel)
        notification_id = notification.id or uuid.uuid4().hex
        if notification_id in self._notifications:
            raise DuplicateIdError("Notification", notification_id)

        stored = Notification(
            id=notification_id,
            title=notification.title,
            body=notification.body,
            channel=channel,
            read=False,
            created_at=self._clock(),
        )

        self._notifications[notification_id] = stored
        self._order.append(notification_id)
        self._unread += 1
        logger.info(f"Pushed {channel.value} notification {notification_id}: {stored.title}")

        self.changes.publish("pushed", notification_id, stored)
        self._deliver(stored)
        return stored

    def push_emergency(self, title: str, body: str) -> Notification:
        return self.push(NotificationCreate(title=title, body=body, channel=NotificationChannel.EMERGENCY.value))

    def push_relief_update(self, title: str, body: str) -> Notification:
        return self.push(NotificationCreate(title=title, body=body, channel=NotificationChannel.RELIEF_UPDATE.value))

    def mark_read(self, notification_id: str) -> bool:
        """
        Mark a notification as read.

        Returns:
            True if it was unread, False if it was already read (no-op)

        Raises:
            NotFoundError: unknown id
        """
        current = self._notifications.get(notification_id)
        if current is None:
            raise NotFoundError("Notification", notification_id)
        if current.read:
            return False

        updated = current.model_copy(update={"read": True})
        self._notifications[notification_id] = updated
        self._unread -= 1

        self.changes.publish("read", notification_id, updated)
        return True

    def mark_all_read(self) -> int:
        """Mark every unread notification as read. Returns how many changed."""
        changed = 0
        for notification_id in list(self._order):
            if not self._notifications[notification_id].read:
                self.mark_read(notification_id)
                changed += 1
        return changed

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        return self.changes.subscribe(callback)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def unread_count(self) -> int:
        return self._unread

    def get(self, notification_id: str) -> Notification:
        notification = self._notifications.get(notification_id)
        if notification is None:
            raise NotFoundError("Notification", notification_id)
        return notification

    def list(
        self,
        channel: Optional[Union[NotificationChannel, str]] = None,
        unread_only: bool = False,
    ) -> List[Notification]:
        """
        Notifications, newest first.

        Raises:
            InvalidChannelError: channel filter is not a recognized channel
        """
        wanted = self.parse_channel(channel) if channel is not None else None

        items = [self._notifications[nid] for nid in reversed(self._order)]
        if wanted is not None:
            items = [n for n in items if n.channel == wanted]
        if unread_only:
            items = [n for n in items if not n.read]

        # Stable sort keeps push order for identical timestamps
        items.sort(key=lambda n: n.created_at, reverse=True)
        return items

    def __len__(self) -> int:
        return len(self._notifications)

    # ------------------------------------------------------------------
    # Delivery
    # ------------------------------------------------------------------

    def _deliver(self, notification: Notification) -> None:
        if self._dispatcher is None:
            return
        urgency = self.urgency_for(notification.channel)
        try:
            accepted = self._dispatcher.deliver(notification, urgency)
            if not accepted:
                logger.warning(f"Dispatcher declined notification {notification.id} ({urgency})")
        except Exception as e:
            logger.warning(f"Failed to deliver notification {notification.id}: {e}", exc_info=True)
