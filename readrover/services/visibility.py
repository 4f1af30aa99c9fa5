"""Activity visibility index for ReadRover.

Each activity carries an explicit allow-list of viewers (its visibleTo set),
kept in sync with the friend graph by propagation passes and extended by
comment threads. Every write here is an INSERT OR IGNORE against the unique
(activity_id, user_id) index: a monotone set union that never removes a
viewer. Passes can be re-run in any order after a partial failure and
converge on the same set.
"""

import logging
from datetime import datetime, timezone
from typing import Dict, Any, Set

from ..models import first_row, transaction
from .errors import NotFound
from .users import require_user

logger = logging.getLogger(__name__)

_GRANT = """
    INSERT OR IGNORE INTO activity_visibility (activity_id, user_id, granted_at)
    VALUES (?, ?, ?)
"""

# Every activity owned by the second parameter becomes visible to the first.
_GRANT_OWNER_ACTIVITIES = """
    INSERT OR IGNORE INTO activity_visibility (activity_id, user_id, granted_at)
    SELECT a.id, ?, ? FROM activity a WHERE a.user_id = ?
"""

# Every friend of the owner becomes a viewer of one activity.
_GRANT_OWNER_FRIENDS = """
    INSERT OR IGNORE INTO activity_visibility (activity_id, user_id, granted_at)
    SELECT ?, f.friend_id, ? FROM friendship f WHERE f.user_id = ?
"""

# The user becomes a viewer of every friend's activities.
_GRANT_FRIENDS_ACTIVITIES_TO_USER = """
    INSERT OR IGNORE INTO activity_visibility (activity_id, user_id, granted_at)
    SELECT a.id, ?, ? FROM activity a
    JOIN friendship f ON f.friend_id = a.user_id
    WHERE f.user_id = ?
"""

# Every friend of the user becomes a viewer of the user's activities.
_GRANT_USER_ACTIVITIES_TO_FRIENDS = """
    INSERT OR IGNORE INTO activity_visibility (activity_id, user_id, granted_at)
    SELECT a.id, f.friend_id, ? FROM activity a
    JOIN friendship f ON f.user_id = a.user_id
    WHERE a.user_id = ?
"""


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def grant_visibility(db_tables: Dict[str, Any], activity_id: int, *user_ids: int) -> None:
    """Add users to an activity's visibleTo set if they are not already in it."""
    db = db_tables['db']
    granted_at = _now()
    with transaction(db_tables):
        for user_id in dict.fromkeys(user_ids):
            db.execute(_GRANT, [activity_id, user_id, granted_at])


def seed_activity_visibility(db_tables: Dict[str, Any], activity_id: int, owner_id: int) -> None:
    """Make a new activity visible to its owner and every current friend of the owner."""
    db = db_tables['db']
    granted_at = _now()
    with transaction(db_tables):
        db.execute(_GRANT, [activity_id, owner_id, granted_at])
        db.execute(_GRANT_OWNER_FRIENDS, [activity_id, granted_at, owner_id])


def propagate_new_friendship(db_tables: Dict[str, Any], user_a_id: int, user_b_id: int) -> None:
    """Union a new friendship into both users' activities.

    Every activity owned by user A becomes visible to user B, and every
    activity owned by user B becomes visible to user A. Existing viewers are
    never removed.
    """
    db = db_tables['db']
    granted_at = _now()
    with transaction(db_tables):
        db.execute(_GRANT_OWNER_ACTIVITIES, [user_b_id, granted_at, user_a_id])
        db.execute(_GRANT_OWNER_ACTIVITIES, [user_a_id, granted_at, user_b_id])
    logger.info(f"Propagated visibility between users {user_a_id} and {user_b_id}")


def resync_all_friends(db_tables: Dict[str, Any], user_id: int) -> int:
    """Repair pass: ensure bidirectional visibility with every current friend.

    Heals any missed incremental propagation. Safe to call any number of
    times, e.g. on session start.

    Returns:
        The number of friends the pass covered
    """
    require_user(db_tables, user_id)
    db = db_tables['db']
    granted_at = _now()
    with transaction(db_tables):
        db.execute(_GRANT_FRIENDS_ACTIVITIES_TO_USER, [user_id, granted_at, user_id])
        db.execute(_GRANT_USER_ACTIVITIES_TO_FRIENDS, [granted_at, user_id])
        friend_count = db.execute(
            "SELECT COUNT(*) FROM friendship WHERE user_id = ?", [user_id]
        ).fetchone()[0]
    logger.info(f"Resynced activity visibility for user {user_id} across {friend_count} friends")
    return friend_count


def get_visible_to(db_tables: Dict[str, Any], activity_id: int) -> Set[int]:
    """Get the set of user IDs allowed to view an activity."""
    if first_row(db_tables['activities'], "id = ?", [activity_id]) is None:
        raise NotFound("Activity not found")
    rows = db_tables['activity_visibility'](where="activity_id = ?", where_args=[activity_id])
    return {row.user_id for row in rows}


def can_view_activity(db_tables: Dict[str, Any], activity_id: int, user_id: int) -> bool:
    """Check whether a user is in an activity's visibleTo set."""
    row = first_row(
        db_tables['activity_visibility'], "activity_id = ? AND user_id = ?", [activity_id, user_id]
    )
    return row is not None
