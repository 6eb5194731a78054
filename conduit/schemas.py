from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from conduit.slug import slugify


class CamelModel(BaseModel):
    """Wire models: camelCase on the wire, snake_case in Python."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# --- User ---

class NewUser(CamelModel):
    username: str = Field(min_length=1, max_length=50)
    email: str = Field(min_length=3, max_length=255)
    password: str = Field(min_length=1)


class NewUserRequest(BaseModel):
    user: NewUser


class LoginUser(CamelModel):
    email: str
    password: str


class LoginUserRequest(BaseModel):
    user: LoginUser


class UpdateUser(CamelModel):
    email: str | None = Field(None, min_length=3, max_length=255)
    username: str | None = Field(None, min_length=1, max_length=50)
    password: str | None = Field(None, min_length=1)
    bio: str | None = None
    image: str | None = None


class UpdateUserRequest(BaseModel):
    user: UpdateUser


class UserResponse(CamelModel):
    email: str
    token: str
    username: str
    bio: str
    image: str | None


class UserEnvelope(BaseModel):
    user: UserResponse


# --- Profile ---

class ProfileResponse(CamelModel):
    username: str
    bio: str
    image: str | None
    following: bool = False


class ProfileEnvelope(BaseModel):
    profile: ProfileResponse


# --- Article ---

class NewArticle(CamelModel):
    title: str = Field(min_length=1, max_length=200)
    description: str = ""
    body: str = ""
    tag_list: list[str] = []

    @field_validator("title")
    @classmethod
    def title_must_yield_slug(cls, v: str) -> str:
        if not slugify(v):
            raise ValueError("title must contain at least one letter or digit")
        return v


class NewArticleRequest(BaseModel):
    article: NewArticle


class UpdateArticle(CamelModel):
    title: str | None = Field(None, min_length=1, max_length=200)
    description: str | None = None
    body: str | None = None


class UpdateArticleRequest(BaseModel):
    article: UpdateArticle


class ArticleResponse(CamelModel):
    slug: str
    title: str
    description: str
    body: str
    tag_list: list[str]
    created_at: datetime
    updated_at: datetime
    favorited: bool
    favorites_count: int
    author: ProfileResponse


class ArticleEnvelope(BaseModel):
    article: ArticleResponse


class MultipleArticlesResponse(CamelModel):
    articles: list[ArticleResponse]
    articles_count: int


# --- Comment ---

class NewComment(CamelModel):
    body: str = Field(min_length=1)


class NewCommentRequest(BaseModel):
    comment: NewComment


class CommentResponse(CamelModel):
    id: int
    created_at: datetime
    updated_at: datetime
    body: str
    author: ProfileResponse


class CommentEnvelope(BaseModel):
    comment: CommentResponse


class MultipleCommentsResponse(BaseModel):
    comments: list[CommentResponse]


# --- Tags ---

class TagsResponse(BaseModel):
    tags: list[str]


# --- Metrics ---

class MetricsResponse(BaseModel):
    total_users: int
    total_articles: int
    total_comments: int
    total_tags: int
    total_follows: int
    total_favorites: int
    avg_comments_per_article: float
