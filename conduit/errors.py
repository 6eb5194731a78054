"""
Error taxonomy shared by the store, the service layer and the HTTP layer.

The store itself only ever raises ``NotFoundError`` and ``ConflictError``;
the remaining classes are raised by the credential / identity
collaborators and by ownership checks in the service layer.  The app
factory maps each class to an HTTP status code.
"""


class ConduitError(Exception):
    """Base class for every domain error surfaced to callers."""

    status_code: int = 400

    def __init__(self, message: str = "") -> None:
        super().__init__(message or self.__class__.__doc__)
        self.message = message or self.__class__.__doc__


class NotFoundError(ConduitError):
    """Referenced entity does not exist."""

    status_code = 404


class ConflictError(ConduitError):
    """Uniqueness constraint violated."""

    status_code = 409


class InvalidCredentialError(ConduitError):
    """Invalid email or password."""

    status_code = 401


class InvalidTokenError(ConduitError):
    """Missing, malformed or expired access token."""

    status_code = 401


class PermissionDeniedError(ConduitError):
    """Caller is not allowed to modify this resource."""

    status_code = 403
