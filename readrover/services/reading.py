"""Reading progress for ReadRover.

Starting, updating and finishing a book each record an Activity. A new
activity is visible to its owner and every current friend of the owner.
"""

import logging
from datetime import datetime, timezone
from typing import Dict, Any, Optional, Tuple

from ..models import Activity, ActivityKind, Book, first_row, transaction
from .errors import NotFound, Unauthorized
from .visibility import seed_activity_visibility

logger = logging.getLogger(__name__)


def add_book(db_tables: Dict[str, Any], user_id: int, title: str, authors: str = "",
             google_books_id: str = "", thumbnail: str = "", page_count: int = 0) -> Book:
    """Add a book to a user's shelf."""
    book = db_tables['books'].insert(Book(
        user_id=user_id,
        title=title,
        authors=authors,
        google_books_id=google_books_id,
        thumbnail=thumbnail,
        page_count=page_count or 0,
        added_at=datetime.now(timezone.utc),
    ))
    logger.info(f"User {user_id} added book {book.id}")
    return book


def get_owned_book(db_tables: Dict[str, Any], user_id: int, book_id: int) -> Book:
    """Get a book the user owns.

    Raises:
        NotFound: the book does not exist
        Unauthorized: the book belongs to another user
    """
    book = first_row(db_tables['books'], "id = ?", [book_id])
    if book is None:
        raise NotFound("Book not found")
    if book.user_id != user_id:
        raise Unauthorized()
    return book


def _update_book(db_tables: Dict[str, Any], book_id: int, updates: Dict[str, Any]) -> Book:
    db_tables['books'].update(updates, book_id)
    return first_row(db_tables['books'], "id = ?", [book_id])


def create_activity(db_tables: Dict[str, Any], user_id: int, book_id: int, kind: str,
                    content: str = "", progress: Optional[float] = None) -> Activity:
    """Record an activity and make it visible to the owner and the owner's friends."""
    kind = ActivityKind(kind).value
    with transaction(db_tables):
        activity = db_tables['activities'].insert(Activity(
            user_id=user_id,
            book_id=book_id,
            kind=kind,
            content=content,
            progress=progress,
            created_at=datetime.now(timezone.utc),
        ))
        seed_activity_visibility(db_tables, activity.id, user_id)
    logger.debug(f"Created {kind} activity {activity.id} for user {user_id}")
    return activity


def start_reading(db_tables: Dict[str, Any], user_id: int, book_id: int) -> Tuple[Book, Activity]:
    """Mark a book as currently reading and record a 'started' activity."""
    book = get_owned_book(db_tables, user_id, book_id)
    with transaction(db_tables):
        book = _update_book(db_tables, book.id, {'currently_reading': True})
        activity = create_activity(
            db_tables, user_id, book.id, ActivityKind.STARTED,
            content=f'Started reading "{book.title}"',
        )
    logger.info(f"User {user_id} started reading book {book.id}")
    return book, activity


def stop_reading(db_tables: Dict[str, Any], user_id: int, book_id: int) -> Book:
    """Remove a book from currently reading; no activity is recorded."""
    book = get_owned_book(db_tables, user_id, book_id)
    return _update_book(db_tables, book.id, {'currently_reading': False})


def update_progress(db_tables: Dict[str, Any], user_id: int, book_id: int, progress: float,
                    pages_read: Optional[int] = None, note: str = "") -> Tuple[Book, Activity]:
    """Update reading progress (a percentage) and record a 'progress' activity.

    Raises:
        NotFound: the book does not exist
        Unauthorized: the book belongs to another user
        ValueError: progress is outside 0-100
    """
    book = get_owned_book(db_tables, user_id, book_id)
    progress = float(progress)
    if not 0 <= progress <= 100:
        raise ValueError("Progress must be between 0 and 100")

    updates = {'progress': progress}
    if pages_read is not None:
        updates['pages_read'] = int(pages_read)

    content = f'Updated progress on "{book.title}" to {progress:g}%'
    if note:
        content = f"{content}: {note}"

    with transaction(db_tables):
        book = _update_book(db_tables, book.id, updates)
        activity = create_activity(
            db_tables, user_id, book.id, ActivityKind.PROGRESS,
            content=content, progress=progress,
        )
    logger.info(f"User {user_id} updated progress on book {book.id} to {progress:g}%")
    return book, activity


def finish_book(db_tables: Dict[str, Any], user_id: int, book_id: int) -> Tuple[Book, Activity]:
    """Mark a book finished and record a 'finished' activity."""
    book = get_owned_book(db_tables, user_id, book_id)
    with transaction(db_tables):
        book = _update_book(db_tables, book.id, {
            'progress': 100,
            'pages_read': book.page_count,
            'currently_reading': False,
            'date_finished': datetime.now(timezone.utc),
        })
        activity = create_activity(
            db_tables, user_id, book.id, ActivityKind.FINISHED,
            content=f'Finished reading "{book.title}"',
        )
    logger.info(f"User {user_id} finished book {book.id}")
    return book, activity
