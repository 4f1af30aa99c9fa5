"""ReadRover - a social reading tracker.

This is the main package for ReadRover: readers log progress on their books
and follow a feed of their friends' reading activity, with comment threads.

Package Structure:
- readrover.models: Data model classes and database setup
- readrover.services: Business logic (social graph, visibility, comments, reading, feed)
- readrover.config: Environment-driven settings
- readrover.logging_config: Shared logging setup
"""

__version__ = "0.1.0"

# Re-export commonly used items for convenience
from .models import (
    # Entity classes
    User,
    Book,
    Activity,
    ActivityKind,
    Comment,
    Notification,
    NotificationKind,
    # Database
    setup_database,
)

from .services import (
    # Errors
    ReadRoverError,
    NotFound,
    AlreadyRequested,
    AlreadyFriends,
    NoSuchRequest,
    Unauthorized,
    # Social graph
    send_friend_request,
    accept_friend_request,
    add_friend,
    # Visibility
    propagate_new_friendship,
    resync_all_friends,
    # Comments
    add_comment,
    add_reply,
)

__all__ = [
    # Version
    '__version__',
    # Models
    'User',
    'Book',
    'Activity',
    'ActivityKind',
    'Comment',
    'Notification',
    'NotificationKind',
    'setup_database',
    # Errors
    'ReadRoverError',
    'NotFound',
    'AlreadyRequested',
    'AlreadyFriends',
    'NoSuchRequest',
    'Unauthorized',
    # Social graph
    'send_friend_request',
    'accept_friend_request',
    'add_friend',
    # Visibility
    'propagate_new_friendship',
    'resync_all_friends',
    # Comments
    'add_comment',
    'add_reply',
]
