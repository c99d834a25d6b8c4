"""
Error taxonomy for the Secreto Diary service.

Every error the service raises on purpose derives from DiaryError so the
HTTP layer can translate it into a status code and a JSON body in one place.
"""


class DiaryError(Exception):
    """Base class for all service errors."""

    status_code = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(DiaryError):
    """Malformed input: bad filter parameters or missing required fields."""

    status_code = 400


class EditWindowClosedError(ValidationError):
    """The entry is older than the edit window and is read-only."""

    status_code = 403


class NotFoundError(DiaryError):
    """The entry (or user) does not exist or is not owned by the caller."""

    status_code = 404


class AuthError(DiaryError):
    """Invalid or expired credentials."""

    status_code = 403


class MissingCredentialsError(AuthError):
    """No credentials were supplied at all."""

    status_code = 401


class DependencyError(DiaryError):
    """An external collaborator (store, image host, translator) failed."""

    status_code = 502
