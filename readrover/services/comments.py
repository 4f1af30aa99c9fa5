"""Comment and reply threads on activities.

A comment is a row in the comment table with no parent; a reply is a row
whose parent_comment_id names a top-level comment on the same activity.
Replies are never nested further. Comments read back most-recent-first and
replies oldest-first, both ordered by insertion id.

Posting to a thread grants the participants visibility of the whole
activity, independent of the friend graph.
"""

import logging
from datetime import datetime, timezone
from typing import Dict, Any, List

from ..models import Activity, Comment, NotificationKind, first_row, transaction
from .errors import NotFound
from .notifications import notify
from .users import get_user, require_user
from .visibility import grant_visibility

logger = logging.getLogger(__name__)


def get_activity(db_tables: Dict[str, Any], activity_id: int) -> Activity:
    """Get an activity by ID, raising NotFound if it does not exist."""
    activity = first_row(db_tables['activities'], "id = ?", [activity_id])
    if activity is None:
        raise NotFound("Activity not found")
    return activity


def get_comment(db_tables: Dict[str, Any], activity_id: int, comment_id: int) -> Comment:
    """Get a top-level comment on an activity, raising NotFound otherwise."""
    comment = first_row(
        db_tables['comments'],
        "id = ? AND activity_id = ? AND parent_comment_id IS NULL",
        [comment_id, activity_id],
    )
    if comment is None:
        raise NotFound("Comment not found")
    return comment


def get_replies(db_tables: Dict[str, Any], comment_id: int) -> List[Comment]:
    """Get the replies to a comment, oldest first."""
    return db_tables['comments'](where="parent_comment_id = ?", where_args=[comment_id], order_by="id")


def get_comments(db_tables: Dict[str, Any], activity_id: int) -> List[Comment]:
    """Get an activity's comments most-recent-first, each with a .replies list."""
    comments = db_tables['comments'](
        where="activity_id = ? AND parent_comment_id IS NULL",
        where_args=[activity_id],
        order_by="id DESC",
    )
    for comment in comments:
        comment.replies = get_replies(db_tables, comment.id)
    return comments


def _display_name(db_tables: Dict[str, Any], user_id: int) -> str:
    user = get_user(db_tables, user_id)
    return user.username if user else "Someone"


def add_comment(db_tables: Dict[str, Any], activity_id: int, author_id: int, content: str) -> Comment:
    """Add a comment to an activity.

    The comment is stored verbatim and the author and activity owner are
    added to the activity's visibleTo set in the same transaction.

    Raises:
        NotFound: the activity or the author does not exist
    """
    activity = get_activity(db_tables, activity_id)
    require_user(db_tables, author_id)

    with transaction(db_tables):
        comment = db_tables['comments'].insert(Comment(
            activity_id=activity.id,
            user_id=author_id,
            content=content,
            created_at=datetime.now(timezone.utc),
        ))
        grant_visibility(db_tables, activity.id, author_id, activity.user_id)

    logger.info(f"New comment {comment.id} on activity {activity.id} by user {author_id}")

    if author_id != activity.user_id:
        notify(db_tables, activity.user_id, NotificationKind.COMMENT,
               f"{_display_name(db_tables, author_id)} commented on your activity")
    return comment


def add_reply(db_tables: Dict[str, Any], activity_id: int, comment_id: int, author_id: int, content: str) -> Comment:
    """Append a reply to a comment on an activity.

    The replier, the activity owner, and the original commenter are added to
    the activity's visibleTo set in the same transaction.

    Raises:
        NotFound: the activity, the comment or the author does not exist
    """
    activity = get_activity(db_tables, activity_id)
    comment = get_comment(db_tables, activity.id, comment_id)
    require_user(db_tables, author_id)

    with transaction(db_tables):
        reply = db_tables['comments'].insert(Comment(
            activity_id=activity.id,
            user_id=author_id,
            content=content,
            parent_comment_id=comment.id,
            created_at=datetime.now(timezone.utc),
        ))
        grant_visibility(db_tables, activity.id, author_id, activity.user_id, comment.user_id)

    logger.info(f"New reply {reply.id} on activity {activity.id}, comment {comment.id} by user {author_id}")

    replier = _display_name(db_tables, author_id)
    for recipient_id in dict.fromkeys([activity.user_id, comment.user_id]):
        if recipient_id != author_id:
            notify(db_tables, recipient_id, NotificationKind.REPLY,
                   f"{replier} replied to a comment on your activity"
                   if recipient_id == activity.user_id
                   else f"{replier} replied to your comment")
    return reply
