"""
Article store.

Listing goes through ``ArticleFilter`` so the service layer never builds
SQL fragments itself: it states *who* is asking and *what* to match, and
``find_articles`` turns that into one COUNT and one page SELECT.
"""
from dataclasses import dataclass

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import joinedload

from app.models import Article

# Largest values the database accepts for an OFFSET (BIGINT) and an
# `articles.id` (INTEGER) parameter.
MAX_OFFSET = 2**63 - 1
MAX_ARTICLE_ID = 2**31 - 1


@dataclass(frozen=True)
class ArticleFilter:
    owner_id: int
    status: str | None = None
    search: str | None = None

    def clauses(self) -> list:
        clauses = [Article.user_id == self.owner_id]
        if self.status:
            clauses.append(Article.status == self.status)
        if self.search:
            # autoescape: % and _ in the search term match literally
            clauses.append(Article.title.icontains(self.search, autoescape=True))
        return clauses


async def find_articles(
    db: AsyncSession,
    filters: ArticleFilter,
    *,
    limit: int,
    offset: int,
) -> tuple[list[Article], int]:
    """
    Return one page of matching articles (owner eager-loaded) and the
    total number of matches ignoring *limit*/*offset*.

    Newest first; ``id`` breaks ties between rows created in the same
    timestamp tick.
    """
    clauses = filters.clauses()

    count_q = select(func.count()).select_from(Article).where(*clauses)
    total: int = (await db.execute(count_q)).scalar_one()
    if offset > MAX_OFFSET:
        return [], total

    rows_q = (
        select(Article)
        .where(*clauses)
        .options(joinedload(Article.user))
        .order_by(Article.created_at.desc(), Article.id.desc())
        .offset(offset)
        .limit(limit)
    )
    result = await db.execute(rows_q)
    return list(result.scalars().all()), total


async def get_owned_article(
    db: AsyncSession, article_id: int, owner_id: int
) -> Article | None:
    """
    Fetch *article_id* only if it belongs to *owner_id*.

    A single predicate on both columns, so a foreign article and a missing
    one are indistinguishable.  ``populate_existing`` makes sure a row
    already in the identity map (e.g. just inserted) comes back with its
    server defaults and owner filled in.
    """
    if not 1 <= article_id <= MAX_ARTICLE_ID:
        return None
    q = (
        select(Article)
        .where(Article.id == article_id, Article.user_id == owner_id)
        .options(joinedload(Article.user))
        .execution_options(populate_existing=True)
    )
    result = await db.execute(q)
    return result.scalar_one_or_none()


async def add_article(
    db: AsyncSession, owner_id: int, title: str, body: str, status: str
) -> Article:
    article = Article(user_id=owner_id, title=title, body=body, status=status)
    db.add(article)
    await db.flush()
    return article


async def delete_article(db: AsyncSession, article: Article) -> None:
    await db.delete(article)
    await db.flush()
