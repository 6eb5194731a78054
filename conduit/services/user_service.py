"""
User service — registration, login and the authenticated user's account.

Identity is keyed by email: every successful register / login / update
issues a fresh access token for the user's current email.  Changing the
email therefore invalidates previously issued tokens.
"""
import logging

from conduit.errors import InvalidCredentialError, NotFoundError
from conduit.models import User, UserUpdate
from conduit.schemas import LoginUser, NewUser, UpdateUser
from conduit.security import create_access_token, hash_password, verify_password
from conduit.store import InMemoryStore

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Serialisation helpers
# ---------------------------------------------------------------------------

def _user_to_dict(user: User, token: str) -> dict:
    return {
        "email": user.email,
        "token": token,
        "username": user.username,
        "bio": user.bio,
        "image": user.image,
    }


# ---------------------------------------------------------------------------
# Public service functions
# ---------------------------------------------------------------------------

def register_user(store: InMemoryStore, data: NewUser) -> dict:
    """
    Create a user and return it with a fresh token.

    The password is hashed before the store is touched; ``ConflictError``
    from the store propagates unchanged.
    """
    password_hash = hash_password(data.password)
    user = User(email=data.email, username=data.username)
    store.create_user(user, password_hash)
    logger.info("Registered user %s", user.username)
    return _user_to_dict(user, create_access_token(user.email))


def login(store: InMemoryStore, data: LoginUser) -> dict:
    """
    Verify *data* against the stored hash.

    An unknown email and a wrong password are indistinguishable to the
    caller: both raise ``InvalidCredentialError``.
    """
    try:
        password_hash = store.get_credential(data.email)
    except NotFoundError:
        raise InvalidCredentialError("invalid email or password") from None

    if not verify_password(data.password, password_hash):
        raise InvalidCredentialError("invalid email or password")

    user = store.get_user_by_email(data.email)
    return _user_to_dict(user, create_access_token(user.email))


def get_current_user(user: User, token: str) -> dict:
    return _user_to_dict(user, token)


def update_user(store: InMemoryStore, user: User, data: UpdateUser) -> dict:
    """Apply a partial update to *user* and return it with a new token."""
    updates = UserUpdate(
        email=data.email,
        username=data.username,
        bio=data.bio,
        image=data.image,
        password_hash=hash_password(data.password) if data.password is not None else None,
    )
    updated = store.update_user(user.email, updates)
    return _user_to_dict(updated, create_access_token(updated.email))
