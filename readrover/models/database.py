"""Database setup and connection management for ReadRover.

This module handles database initialization, migrations, and provides
the setup_database function for creating table connections.
"""

import os
import asyncio
import logging
from contextlib import contextmanager
from typing import Dict, Any

from fastlite import database

from .entities import (
    User, Friendship, FriendRequest, Notification, Book,
    Activity, ActivityVisibility, Comment
)

logger = logging.getLogger(__name__)

# Set-membership tables: the unique pair is what makes "add if absent" atomic.
UNIQUE_INDEXES = {
    'idx_friendship_pair': ('friendship', ('user_id', 'friend_id')),
    'idx_friend_request_pair': ('friend_request', ('to_user_id', 'from_user_id')),
    'idx_activity_visibility_pair': ('activity_visibility', ('activity_id', 'user_id')),
    'idx_user_username': ('user', ('username',)),
    'idx_user_email': ('user', ('email',)),
}

LOOKUP_INDEXES = {
    'idx_activity_user': ('activity', ('user_id',)),
    'idx_comment_activity': ('comment', ('activity_id', 'parent_comment_id')),
    'idx_notification_user': ('notification', ('user_id',)),
}


def validate_primary_key_setup(db, table_name: str, expected_pk_column: str) -> bool:
    """Validate that a table has the correct primary key setup.

    Args:
        db: Database connection object
        table_name: Name of the table to validate
        expected_pk_column: Expected primary key column name

    Returns:
        True if validation passes

    Raises:
        RuntimeError: If validation fails
    """
    table_info = db.execute(f"PRAGMA table_info({table_name})").fetchall()

    # Find primary key columns
    pk_columns = [col for col in table_info if col[5] == 1]  # is_pk == 1

    if len(pk_columns) != 1:
        raise RuntimeError(f"Table {table_name} should have exactly 1 primary key, found {len(pk_columns)}")

    if pk_columns[0][1] != expected_pk_column:
        raise RuntimeError(f"Table {table_name} primary key should be {expected_pk_column}, found {pk_columns[0][1]}")

    if 'INTEGER' not in pk_columns[0][2].upper():
        raise RuntimeError(f"Table {table_name} primary key should be INTEGER, found {pk_columns[0][2]}")

    logger.debug(f"Table {table_name} primary key validation passed")
    return True


def ensure_indexes(db):
    """Create the unique and lookup indexes if they are missing."""
    for index_name, (table_name, columns) in UNIQUE_INDEXES.items():
        db.execute(
            f"CREATE UNIQUE INDEX IF NOT EXISTS {index_name} ON {table_name} ({', '.join(columns)})"
        )
    for index_name, (table_name, columns) in LOOKUP_INDEXES.items():
        db.execute(
            f"CREATE INDEX IF NOT EXISTS {index_name} ON {table_name} ({', '.join(columns)})"
        )


def setup_database(db_path: str = 'data/readrover.db', migrations_dir: str = 'migrations', memory: bool = False) -> Dict[str, Any]:
    """Initialize the database with fastmigrate and all tables.

    Args:
        db_path: Path to the SQLite database file
        migrations_dir: Path to the migrations directory
        memory: If True, use an in-memory database (for testing)

    Returns:
        Dictionary containing database connection and table objects
    """
    if memory:
        db_path = ':memory:'
        logger.debug("Setting up in-memory database")
        db = database(db_path)
    else:
        from fastmigrate.core import create_db, run_migrations, get_db_version

        # Ensure the data directory exists
        db_dir = os.path.dirname(db_path)
        if db_dir:
            os.makedirs(db_dir, exist_ok=True)

        # Initialize fastmigrate managed database
        create_db(db_path)

        # Apply any pending migrations from migrations_dir
        success = run_migrations(db_path, migrations_dir)
        if not success:
            raise RuntimeError("Database migration failed! Application cannot continue.")

        version = get_db_version(db_path)
        logger.info(f"Database initialized at version {version}")

        db = database(db_path)

        # Configure SQLite for better concurrency
        db.execute("PRAGMA journal_mode=WAL")
        db.execute("PRAGMA synchronous=NORMAL")
        db.execute("PRAGMA busy_timeout=30000")  # 30 second timeout

    # Create table objects for FastLite operations with explicit names and primary keys.
    # On disk these connect to the tables created by migrations.
    users = db.create(User, name='user', pk='id', transform=True, if_not_exists=True)
    friendships = db.create(Friendship, name='friendship', pk='id', transform=True, if_not_exists=True)
    friend_requests = db.create(FriendRequest, name='friend_request', pk='id', transform=True, if_not_exists=True)
    notifications = db.create(Notification, name='notification', pk='id', transform=True, if_not_exists=True)
    books = db.create(Book, name='book', pk='id', transform=True, if_not_exists=True)
    activities = db.create(Activity, name='activity', pk='id', transform=True, if_not_exists=True)
    activity_visibility = db.create(ActivityVisibility, name='activity_visibility', pk='id', transform=True, if_not_exists=True)
    comments = db.create(Comment, name='comment', pk='id', transform=True, if_not_exists=True)

    ensure_indexes(db)

    for table_name in ('activity', 'activity_visibility', 'comment'):
        validate_primary_key_setup(db, table_name, 'id')

    return {
        'db': db,
        'users': users,
        'friendships': friendships,
        'friend_requests': friend_requests,
        'notifications': notifications,
        'books': books,
        'activities': activities,
        'activity_visibility': activity_visibility,
        'comments': comments,
    }


def first_row(table, where: str, where_args: list):
    """Return the first matching row of a FastLite table, or None."""
    rows = table(where=where, where_args=where_args, limit=1)
    return rows[0] if rows else None


@contextmanager
def transaction(db_tables: Dict[str, Any]):
    """Run a block of writes as one all-or-nothing unit.

    The apsw connection behind fastlite opens a savepoint on enter and
    releases it on success or rolls it back if the block raises, so nested
    use (a service calling another service) is safe.
    """
    with db_tables['db'].conn:
        yield db_tables


class DatabaseManager:
    """Lazily opens the application database once per process."""

    def __init__(self, db_path: str = None, migrations_dir: str = None):
        self.db_path = db_path
        self.migrations_dir = migrations_dir
        self._db = None
        self._lock = asyncio.Lock()

    async def get_connection(self):
        async with self._lock:
            if self._db is None:
                from ..config import get_settings
                settings = get_settings()
                self._db = setup_database(
                    db_path=self.db_path or settings.database_path,
                    migrations_dir=self.migrations_dir or settings.migrations_dir,
                )
            return self._db


db_manager = DatabaseManager()
