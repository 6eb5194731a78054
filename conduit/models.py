from __future__ import annotations

from datetime import datetime, timezone
from typing import List, Optional

from pydantic import BaseModel, Field


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


# ---------------------------------------------------------------------------
# User
# ---------------------------------------------------------------------------
class User(BaseModel):
    email: str
    username: str
    bio: str = ""
    image: Optional[str] = None

    def to_profile(self) -> Profile:
        """Snapshot of the public profile fields, copied by value."""
        return Profile(username=self.username, bio=self.bio, image=self.image)


class UserUpdate(BaseModel):
    """Partial update; ``None`` means "leave unchanged"."""

    email: Optional[str] = None
    username: Optional[str] = None
    bio: Optional[str] = None
    image: Optional[str] = None
    password_hash: Optional[str] = None


# ---------------------------------------------------------------------------
# Profile (author snapshot embedded in articles and comments)
# ---------------------------------------------------------------------------
class Profile(BaseModel):
    username: str
    bio: str = ""
    image: Optional[str] = None


# ---------------------------------------------------------------------------
# Article
# ---------------------------------------------------------------------------
class Article(BaseModel):
    slug: str
    title: str
    description: str = ""
    body: str = ""
    tag_list: List[str] = Field(default_factory=list)
    author: Profile
    # Derived from the favorite edges; maintained by the store only.
    favorites_count: int = 0
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)


class ArticleUpdate(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    body: Optional[str] = None


# ---------------------------------------------------------------------------
# Comment
# ---------------------------------------------------------------------------
class Comment(BaseModel):
    # Assigned by the store on insert.
    id: int = 0
    body: str
    author: Profile
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)


# ---------------------------------------------------------------------------
# Store statistics
# ---------------------------------------------------------------------------
class StoreStats(BaseModel):
    total_users: int
    total_articles: int
    total_comments: int
    total_tags: int
    total_follows: int
    total_favorites: int
