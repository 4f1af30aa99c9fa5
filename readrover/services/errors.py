"""Error kinds raised by ReadRover services.

Every error means the operation was rejected with no partial mutation.
``status_code`` is what the HTTP layer answers with.
"""


class ReadRoverError(Exception):
    """Base class for rejected operations."""
    status_code = 400

    def __init__(self, message: str = None):
        super().__init__(message or self.default_message)

    default_message = "Operation rejected"


class NotFound(ReadRoverError):
    """A user, activity, comment, book or notification reference did not resolve."""
    status_code = 404
    default_message = "Not found"


class AlreadyRequested(ReadRoverError):
    default_message = "Friend request already sent"


class AlreadyFriends(ReadRoverError):
    default_message = "Already friends"


class NoSuchRequest(ReadRoverError):
    default_message = "No friend request from this user"


class SelfFriendship(ReadRoverError):
    default_message = "Users cannot befriend themselves"


class UserExists(ReadRoverError):
    default_message = "User already exists"


class Unauthorized(ReadRoverError):
    """The actor does not own the resource they are mutating."""
    status_code = 401
    default_message = "User not authorized"
