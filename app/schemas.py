import math
from enum import Enum

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator
from pydantic.alias_generators import to_camel


class ArticleStatus(str, Enum):
    DRAFT = "draft"
    PUBLISHED = "published"


# --- Auth ---

class RegisterRequest(BaseModel):
    username: str = Field(min_length=3, max_length=50, pattern=r"^[A-Za-z0-9_]+$")
    email: EmailStr
    password: str = Field(min_length=6)


class LoginRequest(BaseModel):
    username: str = Field(min_length=1)
    password: str = Field(min_length=1)


class CurrentUser(BaseModel):
    """Identity resolved from a bearer token; lives only for one request."""

    id: int
    username: str


# --- Article ---

class ArticleCreate(BaseModel):
    title: str = Field(min_length=1, max_length=1000)
    body: str = Field(min_length=1)
    status: ArticleStatus = ArticleStatus.DRAFT


class ArticleUpdate(BaseModel):
    """
    Partial update payload.

    A field that is omitted, ``null`` or an empty string means "keep the
    stored value"; anything else is validated with the create rules.
    """

    title: str | None = Field(None, min_length=1, max_length=1000)
    body: str | None = Field(None, min_length=1)
    status: ArticleStatus | None = None

    @field_validator("title", "body", "status", mode="before")
    @classmethod
    def _blank_means_unset(cls, value):
        if value == "":
            return None
        return value


# --- Pagination ---

class Pagination(BaseModel):
    current_page: int
    total_pages: int
    total_items: int
    has_next_page: bool
    has_prev_page: bool
    limit: int

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    @classmethod
    def build(cls, page: int, limit: int, total_items: int) -> "Pagination":
        total_pages = math.ceil(total_items / limit)
        return cls(
            current_page=page,
            total_pages=total_pages,
            total_items=total_items,
            has_next_page=page < total_pages,
            has_prev_page=page > 1,
            limit=limit,
        )
