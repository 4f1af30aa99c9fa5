"""Data model classes for ReadRover.

This module contains only the dataclass definitions for database models.
All business logic and queries live in readrover.services.

Note: These classes use dataclass with default values ordered correctly
(required fields first, optional fields after). They are compatible with
FastLite's db.create() transformation.

Sets from the document model (a user's friends and pending requests, an
activity's visibleTo list) are stored one row per member with a unique index
on the pair, so membership changes are single atomic statements.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional


class ActivityKind(str, Enum):
    """Kinds of reading events an Activity can record."""
    STARTED = "started"
    FINISHED = "finished"
    PROGRESS = "progress"
    COMMENT = "comment"


class NotificationKind(str, Enum):
    """Kinds of entries in a user's notification log."""
    FRIEND_REQUEST = "friendRequest"
    FRIEND_REQUEST_ACCEPTED = "friendRequestAccepted"
    COMMENT = "comment"
    REPLY = "reply"


@dataclass
class User:
    """A reader with a unique handle."""
    username: str
    email: str
    id: Optional[int] = None  # Auto-incrementing primary key
    password_hash: str = ""  # Opaque credential, managed by the auth layer
    bio: str = ""
    profile_picture: str = ""
    created_at: Optional[datetime] = None


@dataclass
class Friendship:
    """One direction of a confirmed friendship; always stored in pairs."""
    user_id: int
    friend_id: int
    id: Optional[int] = None
    created_at: Optional[datetime] = None


@dataclass
class FriendRequest:
    """A pending incoming request: from_user_id asked to_user_id."""
    to_user_id: int
    from_user_id: int
    id: Optional[int] = None
    created_at: Optional[datetime] = None


@dataclass
class Notification:
    """Typed entry in a user's notification log."""
    user_id: int
    kind: str  # see NotificationKind
    content: str
    id: Optional[int] = None
    read: bool = False
    created_at: Optional[datetime] = None


@dataclass
class Book:
    """A book on a user's shelf, with reading progress."""
    user_id: int
    title: str
    id: Optional[int] = None
    authors: str = ""  # Comma separated
    google_books_id: str = ""
    thumbnail: str = ""
    page_count: int = 0
    currently_reading: bool = False
    progress: float = 0
    pages_read: int = 0
    date_finished: Optional[datetime] = None
    added_at: Optional[datetime] = None


@dataclass
class Activity:
    """A reading event owned by one user and tied to one book."""
    user_id: int
    book_id: int
    kind: str  # see ActivityKind
    id: Optional[int] = None
    content: str = ""
    progress: Optional[float] = None
    created_at: Optional[datetime] = None


@dataclass
class ActivityVisibility:
    """Membership row of an activity's visibleTo set."""
    activity_id: int
    user_id: int
    id: Optional[int] = None
    granted_at: Optional[datetime] = None


@dataclass
class Comment:
    """Comment on an activity, or a reply when parent_comment_id is set."""
    activity_id: int
    user_id: int
    content: str
    id: Optional[int] = None
    parent_comment_id: Optional[int] = None  # For threaded replies, one level only
    created_at: Optional[datetime] = None
