"""
In-memory relational store — the single owner of all mutable domain state.

Design notes
------------
- One ``ReadWriteLock`` guards every collection.  Queries take shared
  access; anything that creates, updates or deletes takes exclusive
  access.  Each public method is exactly one critical section, so a caller
  never observes a half-applied mutation.
- Records are copied on the way in and on the way out.  Callers may
  mutate whatever they get back without touching store state.
- Follows and favorites are adjacency maps of sets keyed by the source
  endpoint, not back-references on the entities.
- Every check runs before the first mutation: a failing call leaves all
  structures exactly as they were.
- ``increment_op_count()`` is called once per public method so the
  ``TimingMiddleware`` can report it in the ``X-Store-Op-Count`` header.
"""
import logging
from typing import Iterable

from conduit.errors import ConflictError, NotFoundError
from conduit.models import (
    Article,
    ArticleUpdate,
    Comment,
    StoreStats,
    User,
    UserUpdate,
)
from conduit.opcount import increment_op_count
from conduit.rwlock import ReadWriteLock

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _ordered(articles: Iterable[Article]) -> list[Article]:
    """Newest first; articles created at the same instant by slug ascending."""
    result = sorted(articles, key=lambda a: a.slug)
    result.sort(key=lambda a: a.created_at, reverse=True)
    return result


def _paginate(articles: list[Article], limit: int, offset: int) -> tuple[list[Article], int]:
    """Return copies of the requested window and the pre-pagination total."""
    if limit < 0 or offset < 0:
        raise ValueError("limit and offset must be non-negative")
    page = articles[offset:offset + limit]
    return [a.model_copy(deep=True) for a in page], len(articles)


class InMemoryStore:
    """
    Users, articles, comments, follows, favorites and tags behind a single
    reader/writer lock.

    The store never hashes passwords, issues tokens or derives slugs; it
    stores the opaque values it is handed.
    """

    def __init__(self) -> None:
        self._lock = ReadWriteLock()
        self._users: dict[str, User] = {}  # email -> user
        self._credentials: dict[str, str] = {}  # email -> password hash
        self._usernames: dict[str, str] = {}  # username -> email
        self._articles: dict[str, Article] = {}  # slug -> article
        self._comments: dict[str, dict[int, Comment]] = {}  # slug -> id -> comment
        self._comment_seq: dict[str, int] = {}  # slug -> last assigned comment id
        self._follows: dict[str, set[str]] = {}  # follower -> followed usernames
        self._favorites: dict[str, set[str]] = {}  # slug -> usernames
        self._tags: set[str] = set()

    # ------------------------------------------------------------------
    # Users
    # ------------------------------------------------------------------

    def create_user(self, user: User, password_hash: str) -> None:
        increment_op_count()
        with self._lock.write_locked():
            if user.email in self._users:
                raise ConflictError("email has already been taken")
            if user.username in self._usernames:
                raise ConflictError("username has already been taken")

            self._users[user.email] = user.model_copy(deep=True)
            self._credentials[user.email] = password_hash
            self._usernames[user.username] = user.email
        logger.debug("user created: %s", user.username)

    def get_user_by_email(self, email: str) -> User:
        increment_op_count()
        with self._lock.read_locked():
            user = self._users.get(email)
            if user is None:
                raise NotFoundError("user not found")
            return user.model_copy(deep=True)

    def get_user_by_username(self, username: str) -> User:
        increment_op_count()
        with self._lock.read_locked():
            email = self._usernames.get(username)
            if email is None:
                raise NotFoundError("user not found")
            return self._users[email].model_copy(deep=True)

    def get_credential(self, email: str) -> str:
        """Return the stored password hash for *email*."""
        increment_op_count()
        with self._lock.read_locked():
            try:
                return self._credentials[email]
            except KeyError:
                raise NotFoundError("user not found") from None

    def update_user(self, email: str, updates: UserUpdate) -> User:
        """
        Apply every non-``None`` field of *updates* to the user stored
        under *email* and return the updated copy.

        A new email or username must not belong to another user.  When the
        email changes, the primary entry, the credential entry and the
        username index move together inside the same critical section.
        """
        increment_op_count()
        with self._lock.write_locked():
            user = self._users.get(email)
            if user is None:
                raise NotFoundError("user not found")

            new_email = updates.email if updates.email not in (None, email) else None
            new_username = (
                updates.username if updates.username not in (None, user.username) else None
            )
            if new_email is not None and new_email in self._users:
                raise ConflictError("email has already been taken")
            if new_username is not None and new_username in self._usernames:
                raise ConflictError("username has already been taken")

            if new_email is not None:
                del self._users[email]
                self._users[new_email] = user
                self._credentials[new_email] = self._credentials.pop(email)
                self._usernames[user.username] = new_email
                user.email = new_email

            if new_username is not None:
                del self._usernames[user.username]
                self._usernames[new_username] = user.email
                user.username = new_username

            if updates.password_hash is not None:
                self._credentials[user.email] = updates.password_hash
            if updates.bio is not None:
                user.bio = updates.bio
            if updates.image is not None:
                user.image = updates.image

            logger.debug("user updated: %s", user.username)
            return user.model_copy(deep=True)

    # ------------------------------------------------------------------
    # Articles
    # ------------------------------------------------------------------

    def create_article(self, article: Article) -> None:
        increment_op_count()
        with self._lock.write_locked():
            if article.slug in self._articles:
                raise ConflictError("slug has already been taken")

            stored = article.model_copy(deep=True)
            stored.favorites_count = 0
            self._articles[stored.slug] = stored
            self._tags.update(stored.tag_list)
            self._comments[stored.slug] = {}
            self._comment_seq[stored.slug] = 0
            self._favorites[stored.slug] = set()
        logger.debug("article created: %s", article.slug)

    def get_article(self, slug: str) -> Article:
        increment_op_count()
        with self._lock.read_locked():
            article = self._articles.get(slug)
            if article is None:
                raise NotFoundError("article not found")
            return article.model_copy(deep=True)

    def article_exists(self, slug: str) -> bool:
        increment_op_count()
        with self._lock.read_locked():
            return slug in self._articles

    def update_article(self, slug: str, updates: ArticleUpdate) -> Article:
        """
        Overwrite title / description / body.  Slug, author, tags and both
        timestamps stay as they were.
        """
        increment_op_count()
        with self._lock.write_locked():
            article = self._articles.get(slug)
            if article is None:
                raise NotFoundError("article not found")

            for field in ("title", "description", "body"):
                value = getattr(updates, field)
                if value is not None:
                    setattr(article, field, value)
            return article.model_copy(deep=True)

    def delete_article(self, slug: str) -> None:
        """Remove the article together with its comments and favorite edges."""
        increment_op_count()
        with self._lock.write_locked():
            if slug not in self._articles:
                raise NotFoundError("article not found")

            del self._articles[slug]
            self._comments.pop(slug, None)
            self._comment_seq.pop(slug, None)
            self._favorites.pop(slug, None)
        logger.debug("article deleted: %s", slug)

    def list_articles(
        self,
        tag: str | None = None,
        author: str | None = None,
        favorited: str | None = None,
        limit: int = 20,
        offset: int = 0,
    ) -> tuple[list[Article], int]:
        """
        Return one page of articles matching every non-empty filter, plus
        the total number of matches before pagination.

        Filters: *tag* must be in the article's tag list, *author* must equal
        the author snapshot's username, *favorited* must be a username with a
        favorite edge to the article.
        """
        increment_op_count()
        with self._lock.read_locked():
            matches = []
            for article in self._articles.values():
                if tag and tag not in article.tag_list:
                    continue
                if author and article.author.username != author:
                    continue
                if favorited and favorited not in self._favorites.get(article.slug, ()):
                    continue
                matches.append(article)
            return _paginate(_ordered(matches), limit, offset)

    def get_tags(self) -> list[str]:
        increment_op_count()
        with self._lock.read_locked():
            return sorted(self._tags)

    # ------------------------------------------------------------------
    # Comments
    # ------------------------------------------------------------------

    def add_comment(self, slug: str, comment: Comment) -> int:
        """
        Store *comment* under the article and return its assigned id.

        Ids start at 1 and keep increasing for the article's lifetime; the
        id of a deleted comment is never handed out again.  Deriving the id
        from the live comment count would reuse ids after a delete, so a
        per-article sequence is kept instead.
        """
        increment_op_count()
        with self._lock.write_locked():
            if slug not in self._articles:
                raise NotFoundError("article not found")

            comment_id = self._comment_seq[slug] + 1
            self._comment_seq[slug] = comment_id
            stored = comment.model_copy(deep=True)
            stored.id = comment_id
            self._comments[slug][comment_id] = stored
        logger.debug("comment %d added to %s", comment_id, slug)
        return comment_id

    def get_comments(self, slug: str) -> list[Comment]:
        increment_op_count()
        with self._lock.read_locked():
            if slug not in self._articles:
                raise NotFoundError("article not found")
            comments = self._comments[slug]
            return [comments[i].model_copy(deep=True) for i in sorted(comments)]

    def get_comment(self, slug: str, comment_id: int) -> Comment:
        increment_op_count()
        with self._lock.read_locked():
            if slug not in self._articles:
                raise NotFoundError("article not found")
            comment = self._comments[slug].get(comment_id)
            if comment is None:
                raise NotFoundError("comment not found")
            return comment.model_copy(deep=True)

    def delete_comment(self, slug: str, comment_id: int) -> None:
        increment_op_count()
        with self._lock.write_locked():
            if slug not in self._articles:
                raise NotFoundError("article not found")
            if comment_id not in self._comments[slug]:
                raise NotFoundError("comment not found")
            del self._comments[slug][comment_id]
        logger.debug("comment %d deleted from %s", comment_id, slug)

    # ------------------------------------------------------------------
    # Follows
    # ------------------------------------------------------------------

    def _require_users(self, *usernames: str) -> None:
        for username in usernames:
            if username not in self._usernames:
                raise NotFoundError("user not found")

    def follow(self, follower: str, followed: str) -> None:
        increment_op_count()
        with self._lock.write_locked():
            self._require_users(follower, followed)
            self._follows.setdefault(follower, set()).add(followed)

    def unfollow(self, follower: str, followed: str) -> None:
        increment_op_count()
        with self._lock.write_locked():
            self._require_users(follower, followed)
            self._follows.get(follower, set()).discard(followed)

    def is_following(self, follower: str, followed: str) -> bool:
        """Pure query: unknown usernames are simply not following anyone."""
        increment_op_count()
        with self._lock.read_locked():
            return followed in self._follows.get(follower, ())

    # ------------------------------------------------------------------
    # Favorites
    # ------------------------------------------------------------------

    def _require_article(self, slug: str) -> Article:
        article = self._articles.get(slug)
        if article is None:
            raise NotFoundError("article not found")
        return article

    def favorite(self, slug: str, username: str) -> Article:
        increment_op_count()
        with self._lock.write_locked():
            article = self._require_article(slug)
            self._require_users(username)

            edges = self._favorites[slug]
            edges.add(username)
            article.favorites_count = len(edges)
            return article.model_copy(deep=True)

    def unfavorite(self, slug: str, username: str) -> Article:
        increment_op_count()
        with self._lock.write_locked():
            article = self._require_article(slug)
            self._require_users(username)

            edges = self._favorites[slug]
            edges.discard(username)
            article.favorites_count = len(edges)
            return article.model_copy(deep=True)

    def is_favorite(self, slug: str, username: str) -> bool:
        increment_op_count()
        with self._lock.read_locked():
            return username in self._favorites.get(slug, ())

    # ------------------------------------------------------------------
    # Feed
    # ------------------------------------------------------------------

    def feed(self, username: str, limit: int = 20, offset: int = 0) -> tuple[list[Article], int]:
        """Articles written by the users *username* follows, paginated."""
        increment_op_count()
        with self._lock.read_locked():
            self._require_users(username)
            followed = self._follows.get(username)
            if not followed:
                return _paginate([], limit, offset)

            matches = [a for a in self._articles.values() if a.author.username in followed]
            return _paginate(_ordered(matches), limit, offset)

    # ------------------------------------------------------------------
    # Observability
    # ------------------------------------------------------------------

    def stats(self) -> StoreStats:
        increment_op_count()
        with self._lock.read_locked():
            return StoreStats(
                total_users=len(self._users),
                total_articles=len(self._articles),
                total_comments=sum(len(c) for c in self._comments.values()),
                total_tags=len(self._tags),
                total_follows=sum(len(f) for f in self._follows.values()),
                total_favorites=sum(len(f) for f in self._favorites.values()),
            )
