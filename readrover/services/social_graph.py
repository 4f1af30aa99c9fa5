"""Friend graph operations for ReadRover.

Friendships are symmetric: every confirmed friendship is stored as two rows,
one per direction, written in the same transaction. Pending requests are
the incoming set of the user who received them. Any change that creates a
friendship runs a visibility propagation pass in the same transaction.
"""

import logging
from datetime import datetime, timezone
from typing import Dict, Any, List, Set

from ..models import User, FriendRequest, NotificationKind, first_row, transaction
from .errors import AlreadyFriends, AlreadyRequested, NoSuchRequest, SelfFriendship
from .notifications import notify
from .users import require_user
from .visibility import propagate_new_friendship

logger = logging.getLogger(__name__)


def are_friends(db_tables: Dict[str, Any], user_id: int, other_id: int) -> bool:
    """Check whether two users are confirmed friends."""
    row = first_row(db_tables['friendships'], "user_id = ? AND friend_id = ?", [user_id, other_id])
    return row is not None


def has_pending_request(db_tables: Dict[str, Any], to_user_id: int, from_user_id: int) -> bool:
    """Check whether to_user_id's pending set contains from_user_id."""
    row = first_row(
        db_tables['friend_requests'], "to_user_id = ? AND from_user_id = ?", [to_user_id, from_user_id]
    )
    return row is not None


def get_friend_ids(db_tables: Dict[str, Any], user_id: int) -> Set[int]:
    """Get the set of a user's confirmed friend IDs."""
    rows = db_tables['friendships'](where="user_id = ?", where_args=[user_id])
    return {row.friend_id for row in rows}


def get_friends(db_tables: Dict[str, Any], user_id: int) -> List[User]:
    """Get a user's confirmed friends, ordered by username."""
    return db_tables['users'](
        where="id IN (SELECT friend_id FROM friendship WHERE user_id = ?)",
        where_args=[user_id],
        order_by="username",
    )


def get_friend_requests(db_tables: Dict[str, Any], user_id: int) -> List[User]:
    """Get the users with a pending request to this user, oldest request first."""
    requests = db_tables['friend_requests'](where="to_user_id = ?", where_args=[user_id], order_by="id")
    users = []
    for request in requests:
        requester = first_row(db_tables['users'], "id = ?", [request.from_user_id])
        if requester is not None:
            users.append(requester)
    return users


def search_users(db_tables: Dict[str, Any], query: str = "", limit: int = 20) -> List[User]:
    """Search for users by username or email (case-insensitive substring)."""
    if not query or not query.strip():
        return []
    pattern = f"%{query.strip()}%"
    return db_tables['users'](
        where="username LIKE ? OR email LIKE ?",
        where_args=[pattern, pattern],
        order_by="username",
        limit=limit,
    )


def send_friend_request(db_tables: Dict[str, Any], from_user_id: int, to_user_id: int) -> FriendRequest:
    """Add from_user_id to to_user_id's pending requests and notify the recipient.

    Raises:
        SelfFriendship: both IDs name the same user
        NotFound: either user does not exist
        AlreadyFriends: the users are already friends
        AlreadyRequested: the request is already pending
    """
    if from_user_id == to_user_id:
        raise SelfFriendship()
    sender = require_user(db_tables, from_user_id)
    require_user(db_tables, to_user_id)

    with transaction(db_tables):
        if are_friends(db_tables, from_user_id, to_user_id):
            raise AlreadyFriends()
        if has_pending_request(db_tables, to_user_id, from_user_id):
            raise AlreadyRequested()
        request = db_tables['friend_requests'].insert(FriendRequest(
            to_user_id=to_user_id,
            from_user_id=from_user_id,
            created_at=datetime.now(timezone.utc),
        ))

    logger.info(f"User {from_user_id} sent a friend request to user {to_user_id}")
    notify(db_tables, to_user_id, NotificationKind.FRIEND_REQUEST,
           f"{sender.username} sent you a friend request")
    return request


def _link_friends(db_tables: Dict[str, Any], user_a_id: int, user_b_id: int) -> None:
    """Write both friendship directions, clear requests between the pair, and propagate.

    Must run inside a transaction.
    """
    db = db_tables['db']
    created_at = datetime.now(timezone.utc).isoformat()
    db.execute(
        "DELETE FROM friend_request WHERE (to_user_id = ? AND from_user_id = ?) "
        "OR (to_user_id = ? AND from_user_id = ?)",
        [user_a_id, user_b_id, user_b_id, user_a_id],
    )
    for user_id, friend_id in ((user_a_id, user_b_id), (user_b_id, user_a_id)):
        db.execute(
            "INSERT OR IGNORE INTO friendship (user_id, friend_id, created_at) VALUES (?, ?, ?)",
            [user_id, friend_id, created_at],
        )
    propagate_new_friendship(db_tables, user_a_id, user_b_id)


def accept_friend_request(db_tables: Dict[str, Any], accepter_id: int, requester_id: int) -> None:
    """Accept a pending request, making the two users friends.

    Removes the request, adds each user to the other's friends, and unions
    the friendship into both users' activity visibility, all in one
    transaction. The requester is then notified.

    Raises:
        NotFound: either user does not exist
        NoSuchRequest: the accepter has no pending request from the requester
    """
    accepter = require_user(db_tables, accepter_id)
    require_user(db_tables, requester_id)

    with transaction(db_tables):
        if not has_pending_request(db_tables, accepter_id, requester_id):
            raise NoSuchRequest()
        _link_friends(db_tables, accepter_id, requester_id)

    logger.info(f"User {accepter_id} accepted a friend request from user {requester_id}")
    notify(db_tables, requester_id, NotificationKind.FRIEND_REQUEST_ACCEPTED,
           f"{accepter.username} accepted your friend request")


def add_friend(db_tables: Dict[str, Any], user_id: int, friend_id: int) -> List[User]:
    """Make two users friends directly, bypassing the request flow.

    Returns:
        The user's friends after the change

    Raises:
        SelfFriendship: both IDs name the same user
        NotFound: either user does not exist
        AlreadyFriends: the users are already friends
    """
    if user_id == friend_id:
        raise SelfFriendship()
    require_user(db_tables, user_id)
    require_user(db_tables, friend_id)

    with transaction(db_tables):
        if are_friends(db_tables, user_id, friend_id):
            raise AlreadyFriends()
        _link_friends(db_tables, user_id, friend_id)

    logger.info(f"Users {user_id} and {friend_id} are now friends")
    return get_friends(db_tables, user_id)
