"""User lookup and creation for ReadRover."""

import logging
from datetime import datetime, timezone
from typing import Optional, Dict, Any, Iterable

from ..models import User, first_row, transaction
from .errors import NotFound, UserExists

logger = logging.getLogger(__name__)


def get_user(db_tables: Dict[str, Any], user_id: int) -> Optional[User]:
    """Get a user by ID, returning None if not found."""
    return first_row(db_tables['users'], "id = ?", [user_id])


def require_user(db_tables: Dict[str, Any], user_id: int) -> User:
    """Get a user by ID, raising NotFound if the reference does not resolve."""
    user = get_user(db_tables, user_id)
    if user is None:
        raise NotFound("User not found")
    return user


def create_user(db_tables: Dict[str, Any], username: str, email: str, password_hash: str = "",
                bio: str = "", profile_picture: str = "") -> User:
    """Create a user with a unique username and email.

    Credential handling belongs to the auth layer; the hash is stored as given.
    """
    with transaction(db_tables):
        taken = db_tables['users'](where="username = ? OR email = ?", where_args=[username, email], limit=1)
        if taken:
            raise UserExists()
        user = db_tables['users'].insert(User(
            username=username,
            email=email,
            password_hash=password_hash,
            bio=bio,
            profile_picture=profile_picture,
            created_at=datetime.now(timezone.utc),
        ))
    logger.info(f"Created user {user.id} ({username})")
    return user


def get_user_summaries(db_tables: Dict[str, Any], user_ids: Iterable[int]) -> Dict[int, Dict[str, Any]]:
    """Resolve user IDs to the public fields shown next to their content."""
    ids = sorted(set(user_ids))
    if not ids:
        return {}
    placeholders = ','.join(['?' for _ in ids])
    users = db_tables['users'](where=f"id IN ({placeholders})", where_args=ids)
    return {user.id: public_profile(user) for user in users}


def public_profile(user: User) -> Dict[str, Any]:
    """The subset of a user record that is safe to show other users."""
    return {
        'id': user.id,
        'username': user.username,
        'profile_picture': user.profile_picture,
    }
