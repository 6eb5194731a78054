from fastapi import APIRouter, Depends

from conduit.dependencies import Identity, get_current_identity, get_optional_identity, get_store
from conduit.schemas import ProfileEnvelope
from conduit.services import profile_service
from conduit.store import InMemoryStore

router = APIRouter(prefix="/api/profiles", tags=["profiles"])

@router.get("/{username}", response_model=ProfileEnvelope)
def get_profile(
    username: str,
    identity: Identity | None = Depends(get_optional_identity),
    store: InMemoryStore = Depends(get_store),
):
    viewer = identity.user.username if identity else None
    return {"profile": profile_service.get_profile(store, username, viewer)}

@router.post("/{username}/follow", response_model=ProfileEnvelope)
def follow(
    username: str,
    identity: Identity = Depends(get_current_identity),
    store: InMemoryStore = Depends(get_store),
):
    return {"profile": profile_service.follow_user(store, identity.user, username)}

@router.delete("/{username}/follow", response_model=ProfileEnvelope)
def unfollow(
    username: str,
    identity: Identity = Depends(get_current_identity),
    store: InMemoryStore = Depends(get_store),
):
    return {"profile": profile_service.unfollow_user(store, identity.user, username)}
