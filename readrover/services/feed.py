"""Friend feed and activity thread read-models.

These resolve the IDs stored on activities, comments and replies into the
user and book details the client displays.
"""

import logging
from typing import Dict, Any, List, Iterable

from ..models import Activity
from .comments import get_activity, get_comments
from .serialization import isoformat, split_authors
from .users import get_user_summaries

logger = logging.getLogger(__name__)

DEFAULT_FEED_LIMIT = 20


def _book_summaries(db_tables: Dict[str, Any], book_ids: Iterable[int]) -> Dict[int, Dict[str, Any]]:
    ids = sorted(set(book_ids))
    if not ids:
        return {}
    placeholders = ','.join(['?' for _ in ids])
    books = db_tables['books'](where=f"id IN ({placeholders})", where_args=ids)
    return {
        book.id: {
            'id': book.id,
            'title': book.title,
            'authors': split_authors(book.authors),
            'thumbnail': book.thumbnail,
        }
        for book in books
    }


def _resolve(summaries: Dict[int, Dict[str, Any]], key: int) -> Dict[str, Any]:
    # Users and books are weak references; a dangling ID still renders.
    return summaries.get(key, {'id': key})


def _build_activities(db_tables: Dict[str, Any], activities: List[Activity]) -> List[Dict[str, Any]]:
    threads = {activity.id: get_comments(db_tables, activity.id) for activity in activities}

    user_ids = {activity.user_id for activity in activities}
    for comments in threads.values():
        for comment in comments:
            user_ids.add(comment.user_id)
            user_ids.update(reply.user_id for reply in comment.replies)

    users = get_user_summaries(db_tables, user_ids)
    books = _book_summaries(db_tables, (activity.book_id for activity in activities))

    results = []
    for activity in activities:
        results.append({
            'id': activity.id,
            'user': _resolve(users, activity.user_id),
            'book': _resolve(books, activity.book_id),
            'type': activity.kind,
            'content': activity.content,
            'progress': activity.progress,
            'date': isoformat(activity.created_at),
            'comments': [
                {
                    'id': comment.id,
                    'user': _resolve(users, comment.user_id),
                    'content': comment.content,
                    'date': isoformat(comment.created_at),
                    'replies': [
                        {
                            'id': reply.id,
                            'user': _resolve(users, reply.user_id),
                            'content': reply.content,
                            'date': isoformat(reply.created_at),
                        }
                        for reply in comment.replies
                    ],
                }
                for comment in threads[activity.id]
            ],
        })
    return results


def get_friend_feed(db_tables: Dict[str, Any], user_id: int, limit: int = DEFAULT_FEED_LIMIT) -> List[Dict[str, Any]]:
    """Get the activities a user may view, newest first, ready for display."""
    activities = db_tables['activities'](
        where="id IN (SELECT activity_id FROM activity_visibility WHERE user_id = ?)",
        where_args=[user_id],
        order_by="created_at DESC, id DESC",
        limit=limit,
    )
    logger.debug(f"Friend feed for user {user_id}: {len(activities)} activities")
    return _build_activities(db_tables, activities)


def get_activity_thread(db_tables: Dict[str, Any], activity_id: int) -> Dict[str, Any]:
    """Get one activity with its comment thread, ready for display.

    Raises:
        NotFound: the activity does not exist
    """
    activity = get_activity(db_tables, activity_id)
    return _build_activities(db_tables, [activity])[0]
