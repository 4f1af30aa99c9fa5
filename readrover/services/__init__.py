"""Services package for ReadRover.

This package contains the business logic, separated from routes and data
access. Every operation takes the db_tables store handle explicitly.
"""

from .errors import (
    ReadRoverError,
    NotFound,
    AlreadyRequested,
    AlreadyFriends,
    NoSuchRequest,
    SelfFriendship,
    UserExists,
    Unauthorized,
)

from .users import (
    get_user,
    require_user,
    create_user,
)

from .social_graph import (
    send_friend_request,
    accept_friend_request,
    add_friend,
    are_friends,
    get_friend_ids,
    get_friends,
    get_friend_requests,
    search_users,
)

from .visibility import (
    propagate_new_friendship,
    resync_all_friends,
    grant_visibility,
    get_visible_to,
    can_view_activity,
)

from .comments import (
    add_comment,
    add_reply,
    get_comments,
)

from .reading import (
    add_book,
    create_activity,
    start_reading,
    stop_reading,
    update_progress,
    finish_book,
)

from .notifications import (
    notify,
    get_notifications,
    mark_notification_read,
)

from .feed import (
    get_friend_feed,
    get_activity_thread,
)

__all__ = [
    # Errors
    'ReadRoverError',
    'NotFound',
    'AlreadyRequested',
    'AlreadyFriends',
    'NoSuchRequest',
    'SelfFriendship',
    'UserExists',
    'Unauthorized',
    # Users
    'get_user',
    'require_user',
    'create_user',
    # Social graph
    'send_friend_request',
    'accept_friend_request',
    'add_friend',
    'are_friends',
    'get_friend_ids',
    'get_friends',
    'get_friend_requests',
    'search_users',
    # Visibility
    'propagate_new_friendship',
    'resync_all_friends',
    'grant_visibility',
    'get_visible_to',
    'can_view_activity',
    # Comments
    'add_comment',
    'add_reply',
    'get_comments',
    # Reading
    'add_book',
    'create_activity',
    'start_reading',
    'stop_reading',
    'update_progress',
    'finish_book',
    # Notifications
    'notify',
    'get_notifications',
    'mark_notification_read',
    # Feed
    'get_friend_feed',
    'get_activity_thread',
]
