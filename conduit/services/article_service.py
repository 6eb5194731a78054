"""
Article service — business logic for the Article aggregate.

Design notes
------------
- The author is captured as a ``Profile`` snapshot at creation time; later
  profile edits do not rewrite existing articles.
- Slugs are derived outside the store: ``unique_slug`` checks
  ``store.article_exists`` for a free candidate, then ``create_article``
  claims it.  A concurrent writer can claim the same candidate between
  check and insert, in which case the store raises ``ConflictError`` and
  derivation is retried.
- ``favorited`` and ``author.following`` depend on the viewer and are
  computed per response from the relation queries; they are not stored.
- Only the author (matched by the snapshot's username) may update or
  delete an article.
"""
import logging

from conduit.errors import ConflictError, PermissionDeniedError
from conduit.models import Article, ArticleUpdate, User, utcnow
from conduit.schemas import NewArticle, UpdateArticle
from conduit.services.profile_service import profile_to_dict
from conduit.slug import unique_slug
from conduit.store import InMemoryStore

logger = logging.getLogger(__name__)

# Create attempts before a slug race is reported to the caller.
_MAX_SLUG_ATTEMPTS = 3


# ---------------------------------------------------------------------------
# Serialisation helpers
# ---------------------------------------------------------------------------

def _article_to_dict(store: InMemoryStore, article: Article, viewer: str | None) -> dict:
    """Serialise *article* as seen by *viewer* (a username, or None)."""
    if viewer:
        favorited = store.is_favorite(article.slug, viewer)
        following = store.is_following(viewer, article.author.username)
    else:
        favorited = following = False
    return {
        "slug": article.slug,
        "title": article.title,
        "description": article.description,
        "body": article.body,
        "tag_list": list(article.tag_list),
        "created_at": article.created_at.isoformat(),
        "updated_at": article.updated_at.isoformat(),
        "favorited": favorited,
        "favorites_count": article.favorites_count,
        "author": profile_to_dict(article.author, following),
    }


def _page_to_dict(
    store: InMemoryStore, page: tuple[list[Article], int], viewer: str | None
) -> dict:
    articles, total = page
    return {
        "articles": [_article_to_dict(store, a, viewer) for a in articles],
        "articles_count": total,
    }


def _require_author(article: Article, user: User) -> None:
    if article.author.username != user.username:
        raise PermissionDeniedError("only the author may modify this article")


# ---------------------------------------------------------------------------
# Public service functions
# ---------------------------------------------------------------------------

def list_articles(
    store: InMemoryStore,
    viewer: str | None = None,
    tag: str | None = None,
    author: str | None = None,
    favorited: str | None = None,
    limit: int = 20,
    offset: int = 0,
) -> dict:
    page = store.list_articles(tag=tag, author=author, favorited=favorited, limit=limit, offset=offset)
    return _page_to_dict(store, page, viewer)


def get_feed(store: InMemoryStore, user: User, limit: int = 20, offset: int = 0) -> dict:
    """Articles by the authors *user* follows, newest first."""
    page = store.feed(user.username, limit=limit, offset=offset)
    return _page_to_dict(store, page, user.username)


def get_article(store: InMemoryStore, slug: str, viewer: str | None = None) -> dict:
    return _article_to_dict(store, store.get_article(slug), viewer)


def create_article(store: InMemoryStore, author: User, data: NewArticle) -> dict:
    """Create an article under a slug derived from its title."""
    now = utcnow()
    # Duplicate tags collapse; first occurrence keeps its position.
    tags = list(dict.fromkeys(data.tag_list))

    for attempt in range(1, _MAX_SLUG_ATTEMPTS + 1):
        article = Article(
            slug=unique_slug(data.title, store.article_exists),
            title=data.title,
            description=data.description,
            body=data.body,
            tag_list=tags,
            author=author.to_profile(),
            created_at=now,
            updated_at=now,
        )
        try:
            store.create_article(article)
            break
        except ConflictError:
            if attempt == _MAX_SLUG_ATTEMPTS:
                raise
            logger.warning("Slug %r claimed concurrently, retrying", article.slug)

    logger.info("Article %s created by %s", article.slug, author.username)
    return _article_to_dict(store, article, author.username)


def update_article(store: InMemoryStore, slug: str, user: User, data: UpdateArticle) -> dict:
    """Overwrite title / description / body.  The slug never changes."""
    _require_author(store.get_article(slug), user)
    updated = store.update_article(
        slug,
        ArticleUpdate(title=data.title, description=data.description, body=data.body),
    )
    return _article_to_dict(store, updated, user.username)


def delete_article(store: InMemoryStore, slug: str, user: User) -> None:
    _require_author(store.get_article(slug), user)
    store.delete_article(slug)
    logger.info("Article %s deleted by %s", slug, user.username)


def favorite_article(store: InMemoryStore, slug: str, user: User) -> dict:
    article = store.favorite(slug, user.username)
    return _article_to_dict(store, article, user.username)


def unfavorite_article(store: InMemoryStore, slug: str, user: User) -> dict:
    article = store.unfavorite(slug, user.username)
    return _article_to_dict(store, article, user.username)


def get_tags(store: InMemoryStore) -> list[str]:
    return store.get_tags()
