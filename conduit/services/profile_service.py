"""Profile service — public profiles and the follow graph."""
from conduit.models import Profile, User
from conduit.store import InMemoryStore


def profile_to_dict(profile: Profile, following: bool) -> dict:
    return {
        "username": profile.username,
        "bio": profile.bio,
        "image": profile.image,
        "following": following,
    }


def get_profile(store: InMemoryStore, username: str, viewer: str | None = None) -> dict:
    """
    Return the profile for *username*.  ``following`` is only ever True
    for an authenticated *viewer*.
    """
    user = store.get_user_by_username(username)
    following = store.is_following(viewer, username) if viewer else False
    return profile_to_dict(user.to_profile(), following)


def follow_user(store: InMemoryStore, follower: User, username: str) -> dict:
    store.follow(follower.username, username)
    return get_profile(store, username, follower.username)


def unfollow_user(store: InMemoryStore, follower: User, username: str) -> dict:
    store.unfollow(follower.username, username)
    return get_profile(store, username, follower.username)
