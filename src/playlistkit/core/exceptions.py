"""
Custom exceptions for playlistkit.

The same taxonomy is raised by the service (playlist repository, visibility
policy, request parsing) and by the API client when it decodes an error
response. Every exception carries the HTTP status it is surfaced with:

- PlaylistKitError: Base exception for all playlistkit errors
  - ValidationError: Malformed or missing required field (422)
  - Unauthorized: Missing or invalid credential where one is required (401)
  - Forbidden: Identified caller lacks rights on the resource (403)
  - NotFound: Resource absent, or present but not owned on a mutation path (404)
  - Conflict: Uniqueness violation on membership insert (409)
  - InternalError: Unexpected store or transport failure (500)
"""


class PlaylistKitError(Exception):
    """Base exception class for playlistkit."""

    status_code = 500
    default_message = "Internal Server Error"

    def __init__(self, message: str = None, cause: Exception = None):
        self.message = message or self.default_message
        self.cause = cause
        super().__init__(self.message)


class ValidationError(PlaylistKitError):
    """Raised when request input validation fails."""

    status_code = 422
    default_message = "Invalid input"

    def __init__(self, message: str = None, field: str = None, cause: Exception = None):
        self.field = field
        super().__init__(message, cause=cause)


class Unauthorized(PlaylistKitError):
    """Raised when a credential is missing, malformed, invalid or expired."""

    status_code = 401
    default_message = "Authorization required"


class Forbidden(PlaylistKitError):
    """Raised when an identified caller is denied access."""

    status_code = 403
    default_message = "Access denied"


class NotFound(PlaylistKitError):
    """Raised when a resource does not exist for the acting identity."""

    status_code = 404
    default_message = "Not found"


class Conflict(PlaylistKitError):
    """Raised when an insert violates a uniqueness constraint."""

    status_code = 409
    default_message = "Already exists"


class InternalError(PlaylistKitError):
    """Raised for unexpected store or transport failures."""

    status_code = 500


_BY_STATUS = {
    cls.status_code: cls
    for cls in (ValidationError, Unauthorized, Forbidden, NotFound, Conflict)
}


def error_for_status(status_code: int, message: str = None) -> PlaylistKitError:
    """Build the exception matching an HTTP error status."""
    if status_code == 400:
        return ValidationError(message)
    cls = _BY_STATUS.get(status_code, InternalError)
    return cls(message)
