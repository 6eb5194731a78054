from fastapi import APIRouter, Depends

from conduit.dependencies import get_store
from conduit.schemas import MetricsResponse
from conduit.store import InMemoryStore

router = APIRouter(prefix="/api/metrics", tags=["metrics"])

@router.get("", response_model=MetricsResponse)
def get_metrics(store: InMemoryStore = Depends(get_store)):
    stats = store.stats()
    avg_comments = stats.total_comments / stats.total_articles if stats.total_articles > 0 else 0

    return MetricsResponse(
        **stats.model_dump(),
        avg_comments_per_article=round(avg_comments, 2),
    )
