"""
Comment service — comments scoped to a single article.

Comments cannot be edited.  Only the comment's author may delete it; the
article's author has no special rights over other people's comments.
"""
from conduit.errors import PermissionDeniedError
from conduit.models import Comment, User, utcnow
from conduit.schemas import NewComment
from conduit.services.profile_service import profile_to_dict
from conduit.store import InMemoryStore


def _comment_to_dict(store: InMemoryStore, comment: Comment, viewer: str | None) -> dict:
    following = store.is_following(viewer, comment.author.username) if viewer else False
    return {
        "id": comment.id,
        "created_at": comment.created_at.isoformat(),
        "updated_at": comment.updated_at.isoformat(),
        "body": comment.body,
        "author": profile_to_dict(comment.author, following),
    }


def add_comment(store: InMemoryStore, slug: str, author: User, data: NewComment) -> dict:
    """
    Append a comment to the article identified by *slug*.

    Raises ``NotFoundError`` when the article does not exist.
    """
    now = utcnow()
    comment = Comment(body=data.body, author=author.to_profile(), created_at=now, updated_at=now)
    comment.id = store.add_comment(slug, comment)
    return _comment_to_dict(store, comment, author.username)


def get_comments(store: InMemoryStore, slug: str, viewer: str | None = None) -> list[dict]:
    return [_comment_to_dict(store, c, viewer) for c in store.get_comments(slug)]


def delete_comment(store: InMemoryStore, slug: str, comment_id: int, user: User) -> None:
    comment = store.get_comment(slug, comment_id)
    if comment.author.username != user.username:
        raise PermissionDeniedError("only the author may delete this comment")
    store.delete_comment(slug, comment_id)
