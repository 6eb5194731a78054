from dataclasses import dataclass

from fastapi import Depends, Header, Query, Request

from conduit.config import settings
from conduit.errors import InvalidTokenError, NotFoundError
from conduit.models import User
from conduit.security import decode_access_token
from conduit.store import InMemoryStore

_TOKEN_SCHEMES = ("token", "bearer")


def get_store(request: Request) -> InMemoryStore:
    """The store instance owned by the running application."""
    return request.app.state.store


# ---------------------------------------------------------------------------
# Authentication
# ---------------------------------------------------------------------------

@dataclass
class Identity:
    """The authenticated caller: their current user record and raw token."""

    user: User
    token: str


def _extract_token(authorization: str) -> str:
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() not in _TOKEN_SCHEMES or not token.strip():
        raise InvalidTokenError("expected 'Token <jwt>' authorization header")
    return token.strip()


def _resolve_identity(store: InMemoryStore, authorization: str) -> Identity:
    token = _extract_token(authorization)
    email = decode_access_token(token)
    try:
        user = store.get_user_by_email(email)
    except NotFoundError:
        # Token issued for an email that has since changed.
        raise InvalidTokenError("token does not match any user") from None
    return Identity(user=user, token=token)


def get_current_identity(
    authorization: str | None = Header(None),
    store: InMemoryStore = Depends(get_store),
) -> Identity:
    if not authorization:
        raise InvalidTokenError("authentication required")
    return _resolve_identity(store, authorization)


def get_optional_identity(
    authorization: str | None = Header(None),
    store: InMemoryStore = Depends(get_store),
) -> Identity | None:
    """Like ``get_current_identity`` but anonymous callers get None."""
    if not authorization:
        return None
    return _resolve_identity(store, authorization)


# ---------------------------------------------------------------------------
# Pagination
# ---------------------------------------------------------------------------

class PaginationParams:
    """
    Reusable FastAPI dependency that parses and validates ``limit`` /
    ``offset`` query parameters.

    Usage in a router::

        @router.get("/articles")
        def list_articles(pagination: PaginationParams = Depends()):
            ...

    Attributes
    ----------
    limit:
        Maximum number of items returned, clamped to
        ``settings.MAX_PAGE_SIZE`` regardless of the value supplied.
    offset:
        Number of matching items to skip.
    """

    def __init__(
        self,
        limit: int = Query(
            settings.DEFAULT_PAGE_SIZE,
            ge=0,
            le=100,
            description="Number of items returned (max 100).",
        ),
        offset: int = Query(
            0,
            ge=0,
            description="Number of items to skip.",
        ),
    ) -> None:
        # MAX_PAGE_SIZE is the hard ceiling; the Query bound only documents it.
        self.limit = min(limit, settings.MAX_PAGE_SIZE)
        self.offset = offset
