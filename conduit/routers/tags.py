from fastapi import APIRouter, Depends

from conduit.dependencies import get_store
from conduit.schemas import TagsResponse
from conduit.services import article_service
from conduit.store import InMemoryStore

router = APIRouter(prefix="/api/tags", tags=["tags"])

@router.get("", response_model=TagsResponse)
def list_tags(store: InMemoryStore = Depends(get_store)):
    return {"tags": article_service.get_tags(store)}
