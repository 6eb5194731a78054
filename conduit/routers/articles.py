from fastapi import APIRouter, Depends

from conduit.dependencies import (
    Identity,
    PaginationParams,
    get_current_identity,
    get_optional_identity,
    get_store,
)
from conduit.schemas import (
    ArticleEnvelope,
    CommentEnvelope,
    MultipleArticlesResponse,
    MultipleCommentsResponse,
    NewArticleRequest,
    NewCommentRequest,
    UpdateArticleRequest,
)
from conduit.services import article_service, comment_service
from conduit.store import InMemoryStore

router = APIRouter(prefix="/api/articles", tags=["articles"])


def _viewer(identity: Identity | None) -> str | None:
    return identity.user.username if identity else None

@router.get("", response_model=MultipleArticlesResponse)
def list_articles(
    tag: str | None = None,
    author: str | None = None,
    favorited: str | None = None,
    pagination: PaginationParams = Depends(),
    identity: Identity | None = Depends(get_optional_identity),
    store: InMemoryStore = Depends(get_store),
):
    return article_service.list_articles(
        store, _viewer(identity), tag, author, favorited, pagination.limit, pagination.offset
    )

@router.get("/feed", response_model=MultipleArticlesResponse)
def feed(
    pagination: PaginationParams = Depends(),
    identity: Identity = Depends(get_current_identity),
    store: InMemoryStore = Depends(get_store),
):
    return article_service.get_feed(store, identity.user, pagination.limit, pagination.offset)

@router.post("", status_code=201, response_model=ArticleEnvelope)
def create_article(
    data: NewArticleRequest,
    identity: Identity = Depends(get_current_identity),
    store: InMemoryStore = Depends(get_store),
):
    return {"article": article_service.create_article(store, identity.user, data.article)}

@router.get("/{slug}", response_model=ArticleEnvelope)
def get_article(
    slug: str,
    identity: Identity | None = Depends(get_optional_identity),
    store: InMemoryStore = Depends(get_store),
):
    return {"article": article_service.get_article(store, slug, _viewer(identity))}

@router.put("/{slug}", response_model=ArticleEnvelope)
def update_article(
    slug: str,
    data: UpdateArticleRequest,
    identity: Identity = Depends(get_current_identity),
    store: InMemoryStore = Depends(get_store),
):
    return {"article": article_service.update_article(store, slug, identity.user, data.article)}

@router.delete("/{slug}", status_code=204)
def delete_article(
    slug: str,
    identity: Identity = Depends(get_current_identity),
    store: InMemoryStore = Depends(get_store),
):
    article_service.delete_article(store, slug, identity.user)

@router.post("/{slug}/favorite", response_model=ArticleEnvelope)
def favorite_article(
    slug: str,
    identity: Identity = Depends(get_current_identity),
    store: InMemoryStore = Depends(get_store),
):
    return {"article": article_service.favorite_article(store, slug, identity.user)}

@router.delete("/{slug}/favorite", response_model=ArticleEnvelope)
def unfavorite_article(
    slug: str,
    identity: Identity = Depends(get_current_identity),
    store: InMemoryStore = Depends(get_store),
):
    return {"article": article_service.unfavorite_article(store, slug, identity.user)}

@router.get("/{slug}/comments", response_model=MultipleCommentsResponse)
def get_comments(
    slug: str,
    identity: Identity | None = Depends(get_optional_identity),
    store: InMemoryStore = Depends(get_store),
):
    return {"comments": comment_service.get_comments(store, slug, _viewer(identity))}

@router.post("/{slug}/comments", status_code=201, response_model=CommentEnvelope)
def add_comment(
    slug: str,
    data: NewCommentRequest,
    identity: Identity = Depends(get_current_identity),
    store: InMemoryStore = Depends(get_store),
):
    return {"comment": comment_service.add_comment(store, slug, identity.user, data.comment)}

@router.delete("/{slug}/comments/{comment_id}", status_code=204)
def delete_comment(
    slug: str,
    comment_id: int,
    identity: Identity = Depends(get_current_identity),
    store: InMemoryStore = Depends(get_store),
):
    comment_service.delete_comment(store, slug, comment_id, identity.user)
