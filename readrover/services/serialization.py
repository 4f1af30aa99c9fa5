"""JSON-ready representations of ReadRover records."""

from typing import Dict, Any, Optional

from ..models import Book, Notification, User


def isoformat(value) -> Optional[str]:
    """Render a stored timestamp, which may come back as a datetime or a string."""
    if value is None or value == "":
        return None
    return value.isoformat() if hasattr(value, 'isoformat') else str(value)


def split_authors(authors: str) -> list:
    """Authors are stored comma separated."""
    return [a.strip() for a in (authors or "").split(',') if a.strip()]


def user_to_dict(user: User) -> Dict[str, Any]:
    """The subset of a user record that is safe to show other users."""
    return {
        'id': user.id,
        'username': user.username,
        'email': user.email,
        'profile_picture': user.profile_picture,
    }


def book_to_dict(book: Book) -> Dict[str, Any]:
    return {
        'id': book.id,
        'title': book.title,
        'authors': split_authors(book.authors),
        'thumbnail': book.thumbnail,
        'page_count': book.page_count,
        'currently_reading': bool(book.currently_reading),
        'progress': book.progress,
        'pages_read': book.pages_read,
        'date_finished': isoformat(book.date_finished),
    }


def notification_to_dict(notification: Notification) -> Dict[str, Any]:
    return {
        'id': notification.id,
        'kind': notification.kind,
        'content': notification.content,
        'read': bool(notification.read),
        'date': isoformat(notification.created_at),
    }
