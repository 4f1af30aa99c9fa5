"""Models package for ReadRover.

This package provides database models, setup functions, and the
transaction helper used by the services.
"""

# Entity classes
from .entities import (
    ActivityKind,
    NotificationKind,
    User,
    Friendship,
    FriendRequest,
    Notification,
    Book,
    Activity,
    ActivityVisibility,
    Comment,
)

# Database setup
from .database import (
    setup_database,
    validate_primary_key_setup,
    first_row,
    transaction,
    DatabaseManager,
    db_manager,
)

__all__ = [
    # Entities
    'ActivityKind',
    'NotificationKind',
    'User',
    'Friendship',
    'FriendRequest',
    'Notification',
    'Book',
    'Activity',
    'ActivityVisibility',
    'Comment',
    # Database
    'setup_database',
    'validate_primary_key_setup',
    'first_row',
    'transaction',
    'DatabaseManager',
    'db_manager',
]
