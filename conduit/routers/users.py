from fastapi import APIRouter, Depends

from conduit.dependencies import Identity, get_current_identity, get_store
from conduit.schemas import LoginUserRequest, NewUserRequest, UpdateUserRequest, UserEnvelope
from conduit.services import user_service
from conduit.store import InMemoryStore

router = APIRouter(prefix="/api", tags=["users"])

@router.post("/users", status_code=201, response_model=UserEnvelope)
def register(data: NewUserRequest, store: InMemoryStore = Depends(get_store)):
    return {"user": user_service.register_user(store, data.user)}

@router.post("/users/login", response_model=UserEnvelope)
def login(data: LoginUserRequest, store: InMemoryStore = Depends(get_store)):
    return {"user": user_service.login(store, data.user)}

@router.get("/user", response_model=UserEnvelope)
def get_current_user(identity: Identity = Depends(get_current_identity)):
    return {"user": user_service.get_current_user(identity.user, identity.token)}

@router.put("/user", response_model=UserEnvelope)
def update_current_user(
    data: UpdateUserRequest,
    identity: Identity = Depends(get_current_identity),
    store: InMemoryStore = Depends(get_store),
):
    return {"user": user_service.update_user(store, identity.user, data.user)}
