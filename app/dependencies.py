from fastapi import Depends, Query, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from app.config import settings
from app.errors import Unauthenticated
from app.schemas import ArticleStatus, CurrentUser
from app.security import decode_access_token

# auto_error=False so a missing/non-bearer header reaches our own 401.
bearer_scheme = HTTPBearer(auto_error=False)


async def get_current_user(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> CurrentUser:
    """
    Resolve the ``Authorization: Bearer <token>`` header to an identity.

    The identity is also stored on ``request.state.user`` for anything
    downstream of the route (logging, middleware).  No database access:
    the token alone is trusted until it expires.
    """
    if credentials is None:
        raise Unauthenticated("Access token required")
    user = decode_access_token(credentials.credentials)
    request.state.user = user
    return user


class ArticleListParams:
    """
    Reusable dependency that parses and validates the article listing
    query string.

    Attributes
    ----------
    page:
        1-based page number (minimum 1).
    limit:
        Items per page, 1 to ``settings.MAX_PAGE_SIZE``.
    status:
        Optional ``ArticleStatus`` filter.  An empty ``status=`` is
        treated as absent.
    search:
        Optional case-insensitive title substring.  An empty ``search=``
        is treated as absent.
    offset:
        SQL OFFSET derived from *page* and *limit*.
    """

    def __init__(
        self,
        page: int = Query(
            1,
            ge=1,
            description="Page number (1-based).",
        ),
        limit: int = Query(
            settings.DEFAULT_PAGE_SIZE,
            ge=1,
            le=settings.MAX_PAGE_SIZE,
            description="Number of items per page.",
        ),
        status: str | None = Query(
            None,
            pattern="^(draft|published)?$",
            description="Filter by status: 'draft' or 'published'.",
        ),
        search: str | None = Query(
            None,
            description="Case-insensitive substring to look for in titles.",
        ),
    ) -> None:
        self.page = page
        self.limit = limit
        self.status = ArticleStatus(status) if status else None
        self.search = search or None

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit
