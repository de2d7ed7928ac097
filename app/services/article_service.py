"""
Article service — owner-scoped listing and CRUD for the Article aggregate.

Design notes
------------
- Every operation takes the ``CurrentUser`` resolved by the access gate
  and never touches another user's rows: reads go through
  ``ArticleFilter(owner_id=...)`` and single-row operations through
  ``article_repo.get_owned_article``, which matches id and owner in one
  predicate.  Foreign articles therefore surface as ``NotFound``.
- Updates are merges: a field left out of the payload (or sent as ``null``
  or ``""``) keeps the stored value.
- Service functions flush but do not commit; the transaction boundary
  is owned by the ``get_db`` dependency in the router layer.
"""
import logging

from sqlalchemy.ext.asyncio import AsyncSession

from app.errors import NotFound
from app.models import Article, User
from app.repositories import article_repo
from app.repositories.article_repo import ArticleFilter
from app.schemas import ArticleCreate, ArticleStatus, ArticleUpdate, CurrentUser, Pagination

logger = logging.getLogger(__name__)

ARTICLE_NOT_FOUND = "Article not found"


# ---------------------------------------------------------------------------
# Serialisation helpers
# ---------------------------------------------------------------------------

def _owner_to_dict(user: User | None) -> dict | None:
    # Public projection only; the password hash never leaves the service.
    if user is None:
        return None
    return {"id": user.id, "username": user.username, "email": user.email}


def _article_to_dict(article: Article) -> dict:
    return {
        "id": article.id,
        "user_id": article.user_id,
        "title": article.title,
        "body": article.body,
        "status": article.status,
        "created_at": article.created_at.isoformat() if article.created_at else None,
        "user": _owner_to_dict(article.user),
    }


def empty_result_message(status: ArticleStatus | None, search: str | None) -> str:
    """Explain an empty page by the most specific filter that was applied."""
    if search:
        return f'No articles found matching "{search}"'
    if status:
        return f"No {status.value} articles found"
    return "No articles found"


# ---------------------------------------------------------------------------
# Public service functions
# ---------------------------------------------------------------------------

async def list_articles(
    db: AsyncSession,
    user: CurrentUser,
    page: int = 1,
    limit: int = 10,
    status: ArticleStatus | None = None,
    search: str | None = None,
) -> tuple[str, dict]:
    """
    Return ``(message, data)`` for one page of the caller's articles.

    ``data`` holds ``articles`` and ``pagination``.  An empty page is not
    an error; only the message changes.
    """
    filters = ArticleFilter(
        owner_id=user.id,
        status=status.value if status else None,
        search=search,
    )
    articles, total = await article_repo.find_articles(
        db, filters, limit=limit, offset=(page - 1) * limit
    )
    pagination = Pagination.build(page=page, limit=limit, total_items=total)

    if articles:
        message = "Articles retrieved successfully"
    else:
        message = empty_result_message(status, search)

    return message, {
        "articles": [_article_to_dict(a) for a in articles],
        "pagination": pagination.model_dump(by_alias=True),
    }


async def get_article(db: AsyncSession, user: CurrentUser, article_id: int) -> dict:
    article = await article_repo.get_owned_article(db, article_id, user.id)
    if article is None:
        raise NotFound(ARTICLE_NOT_FOUND)
    return _article_to_dict(article)


async def create_article(db: AsyncSession, user: CurrentUser, data: ArticleCreate) -> dict:
    created = await article_repo.add_article(
        db,
        owner_id=user.id,
        title=data.title,
        body=data.body,
        status=data.status.value,
    )
    # Re-read to pick up created_at and the owner projection.
    article = await article_repo.get_owned_article(db, created.id, user.id)
    logger.info("User %s created article %s", user.id, article.id)
    return _article_to_dict(article)


async def update_article(
    db: AsyncSession, user: CurrentUser, article_id: int, data: ArticleUpdate
) -> dict:
    article = await article_repo.get_owned_article(db, article_id, user.id)
    if article is None:
        raise NotFound(ARTICLE_NOT_FOUND)

    if data.title:
        article.title = data.title
    if data.body:
        article.body = data.body
    if data.status:
        article.status = data.status.value

    await db.flush()
    logger.info("User %s updated article %s", user.id, article.id)
    return _article_to_dict(article)


async def delete_article(db: AsyncSession, user: CurrentUser, article_id: int) -> None:
    article = await article_repo.get_owned_article(db, article_id, user.id)
    if article is None:
        raise NotFound(ARTICLE_NOT_FOUND)

    await article_repo.delete_article(db, article)
    logger.info("User %s deleted article %s", user.id, article_id)
