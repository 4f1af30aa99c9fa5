"""Notification sink and read-model for ReadRover.

Notifications are fire-and-forget: a failure to record one is logged and
never fails the operation that triggered it.
"""

import logging
from datetime import datetime, timezone
from typing import Dict, Any, List

from ..models import Notification, first_row
from .errors import NotFound

logger = logging.getLogger(__name__)


def notify(db_tables: Dict[str, Any], recipient_id: int, kind: str, content: str) -> bool:
    """Append an entry to a user's notification log.

    Returns:
        True if the notification was stored, False if delivery failed
    """
    try:
        db_tables['notifications'].insert(Notification(
            user_id=recipient_id,
            kind=str(getattr(kind, 'value', kind)),
            content=content,
            read=False,
            created_at=datetime.now(timezone.utc),
        ))
        return True
    except Exception as e:
        logger.warning(f"Failed to deliver '{kind}' notification to user {recipient_id}: {e}")
        return False


def get_notifications(db_tables: Dict[str, Any], user_id: int) -> List[Notification]:
    """Get a user's notifications, newest first."""
    return db_tables['notifications'](where="user_id = ?", where_args=[user_id], order_by="id DESC")


def mark_notification_read(db_tables: Dict[str, Any], user_id: int, notification_id: int) -> List[Notification]:
    """Mark one of the user's notifications as read and return the full list."""
    notification = first_row(
        db_tables['notifications'], "id = ? AND user_id = ?", [notification_id, user_id]
    )
    if notification is None:
        raise NotFound("Notification not found")
    db_tables['notifications'].update({'read': True}, notification.id)
    return get_notifications(db_tables, user_id)
