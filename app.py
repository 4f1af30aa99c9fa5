"""Main FastHTML application for ReadRover.

JSON API over the ReadRover services: friends, friend requests, the friend
feed, notifications, comment threads and reading progress.
"""

import json
import logging
from datetime import datetime

from fasthtml.common import *

from readrover.config import get_settings
from readrover.models import db_manager
from readrover.services import (
    ReadRoverError,
    get_friends, search_users, send_friend_request, accept_friend_request,
    get_friend_requests, add_friend, resync_all_friends,
    get_friend_feed, get_activity_thread,
    get_notifications, mark_notification_read,
    add_comment, add_reply,
    start_reading, stop_reading, update_progress, finish_book,
)
from readrover.services.serialization import user_to_dict, book_to_dict, notification_to_dict

logger = logging.getLogger("readrover.app")


def session_identity(req, sess):
    """Default identity: the user ID stored in the session at login."""
    auth_data = sess.get('auth')
    if isinstance(auth_data, dict):
        return auth_data.get('user_id')
    return None


def error_response(e: Exception, action: str):
    """Map a service error to a JSON response. Call from inside an except block."""
    if isinstance(e, ReadRoverError):
        logger.warning(f"Rejected {action}: {e}")
        return JSONResponse({"msg": str(e)}, status_code=e.status_code)
    if isinstance(e, ValueError):
        logger.warning(f"Invalid input for {action}: {e}")
        return JSONResponse({"msg": str(e)}, status_code=400)
    logger.error(f"Error during {action}: {e}", exc_info=True)
    return JSONResponse({"msg": "Server error"}, status_code=500)


def malformed_json(req, exc):
    """FastHTML parses JSON bodies before the route runs, so bad JSON surfaces here."""
    logger.warning(f"Malformed JSON body on {req.url.path}: {exc}")
    return JSONResponse({"msg": "Malformed JSON body"}, status_code=400)


async def read_json(req) -> dict:
    """Parse the request body as a JSON object; an empty body reads as {}."""
    body = await req.body()
    if not body:
        return {}
    try:
        data = json.loads(body)
    except json.JSONDecodeError:
        raise ValueError("Malformed JSON body")
    if not isinstance(data, dict):
        raise ValueError("Request body must be a JSON object")
    return data


def require_content(data: dict) -> str:
    content = data.get('content')
    if not isinstance(content, str) or not content.strip():
        raise ValueError("Content is required")
    return content


def create_app(db_tables=None, identity=None):
    """Build the FastHTML app.

    Args:
        db_tables: Store handle from setup_database; opened lazily through
            db_manager when omitted
        identity: Callable (req, sess) -> Optional[int] naming the acting
            user; defaults to the session's auth data
    """
    settings = get_settings()
    identity = identity or session_identity
    state = {'db_tables': db_tables}

    async def before_handler(req, sess):
        if state['db_tables'] is None:
            state['db_tables'] = await db_manager.get_connection()
        user_id = identity(req, sess)
        if user_id is None:
            return JSONResponse({"msg": "No token, authorization denied"}, status_code=401)
        req.scope['auth'] = int(user_id)

    app, rt = fast_app(
        before=Beforeware(before_handler, skip=[r'/health', r'/favicon\.ico']),
        secret_key=settings.secret_key or None,
        # Session configuration for persistent login
        max_age=30*24*60*60,
        session_cookie='readrover_session',
        same_site='lax',
        sess_https_only=False,
        exception_handlers={json.JSONDecodeError: malformed_json},
    )

    def tables():
        return state['db_tables']

    @rt("/health")
    def health_check():
        """Liveness check."""
        return JSONResponse({"status": "healthy", "timestamp": datetime.now().isoformat()})

    # Friends and friend requests

    @rt("/api/users/friends", methods=["GET"])
    def list_friends(auth):
        try:
            return JSONResponse([user_to_dict(u) for u in get_friends(tables(), auth)])
        except Exception as e:
            return error_response(e, "list friends")

    @rt("/api/users/search", methods=["GET"])
    def search(auth, query: str = ""):
        try:
            users = [u for u in search_users(tables(), query) if u.id != auth]
            return JSONResponse([user_to_dict(u) for u in users])
        except Exception as e:
            return error_response(e, "user search")

    @rt("/api/users/friend-request/{user_id}", methods=["POST"])
    def friend_request(user_id: int, auth):
        try:
            send_friend_request(tables(), auth, user_id)
            return JSONResponse({"msg": "Friend request sent successfully"})
        except Exception as e:
            return error_response(e, "send friend request")

    @rt("/api/users/accept-friend-request/{user_id}", methods=["POST"])
    def accept_request(user_id: int, auth):
        try:
            accept_friend_request(tables(), auth, user_id)
            return JSONResponse({"msg": "Friend request accepted"})
        except Exception as e:
            return error_response(e, "accept friend request")

    @rt("/api/users/friend-requests", methods=["GET"])
    def list_friend_requests(auth):
        try:
            return JSONResponse([user_to_dict(u) for u in get_friend_requests(tables(), auth)])
        except Exception as e:
            return error_response(e, "list friend requests")

    @rt("/api/users/add-friend/{friend_id}", methods=["POST"])
    def add_friend_direct(friend_id: int, auth):
        try:
            friends = add_friend(tables(), auth, friend_id)
            return JSONResponse([user_to_dict(u) for u in friends])
        except Exception as e:
            return error_response(e, "add friend")

    @rt("/api/users/update-activity-visibility", methods=["POST"])
    def update_activity_visibility(auth):
        try:
            friend_count = resync_all_friends(tables(), auth)
            return JSONResponse({"msg": "Activity visibility updated", "friends": friend_count})
        except Exception as e:
            return error_response(e, "update activity visibility")

    @rt("/api/users/friend-feed", methods=["GET"])
    def friend_feed(auth):
        try:
            return JSONResponse(get_friend_feed(tables(), auth, limit=settings.feed_limit))
        except Exception as e:
            return error_response(e, "friend feed")

    # Notifications

    @rt("/api/users/notifications", methods=["GET"])
    def list_notifications(auth):
        try:
            return JSONResponse([notification_to_dict(n) for n in get_notifications(tables(), auth)])
        except Exception as e:
            return error_response(e, "list notifications")

    @rt("/api/users/notifications/{notification_id}", methods=["PUT"])
    def read_notification(notification_id: int, auth):
        try:
            notifications = mark_notification_read(tables(), auth, notification_id)
            return JSONResponse([notification_to_dict(n) for n in notifications])
        except Exception as e:
            return error_response(e, "mark notification read")

    # Comment threads

    @rt("/api/activities/{activity_id}/comments", methods=["POST"])
    async def post_comment(activity_id: int, req, auth):
        try:
            content = require_content(await read_json(req))
            add_comment(tables(), activity_id, auth, content)
            return JSONResponse(get_activity_thread(tables(), activity_id))
        except Exception as e:
            return error_response(e, "add comment")

    @rt("/api/activities/{activity_id}/comments/{comment_id}/replies", methods=["POST"])
    async def post_reply(activity_id: int, comment_id: int, req, auth):
        try:
            content = require_content(await read_json(req))
            add_reply(tables(), activity_id, comment_id, auth, content)
            return JSONResponse(get_activity_thread(tables(), activity_id))
        except Exception as e:
            return error_response(e, "add reply")

    # Reading progress

    @rt("/api/books/{book_id}/reading", methods=["PUT"])
    def mark_reading(book_id: int, auth):
        try:
            book, _ = start_reading(tables(), auth, book_id)
            return JSONResponse(book_to_dict(book))
        except Exception as e:
            return error_response(e, "start reading")

    @rt("/api/books/{book_id}/not-reading", methods=["PUT"])
    def mark_not_reading(book_id: int, auth):
        try:
            return JSONResponse(book_to_dict(stop_reading(tables(), auth, book_id)))
        except Exception as e:
            return error_response(e, "stop reading")

    @rt("/api/books/{book_id}/progress", methods=["PUT"])
    async def set_progress(book_id: int, req, auth):
        try:
            data = await read_json(req)
            if 'progress' not in data:
                raise ValueError("Progress is required")
            book, _ = update_progress(
                tables(), auth, book_id, data['progress'],
                pages_read=data.get('pagesRead'),
                note=data.get('note') or "",
            )
            return JSONResponse(book_to_dict(book))
        except Exception as e:
            return error_response(e, "update progress")

    @rt("/api/books/{book_id}/finish", methods=["PUT"])
    def mark_finished(book_id: int, auth):
        try:
            book, _ = finish_book(tables(), auth, book_id)
            return JSONResponse(book_to_dict(book))
        except Exception as e:
            return error_response(e, "finish book")

    return app


app = create_app()
