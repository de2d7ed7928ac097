"""
Direct service- and repository-layer tests — exercises the listing maths,
filter composition and merge semantics without HTTP in the way.
"""
import pytest
from sqlalchemy import select
from sqlalchemy.exc import InvalidRequestError
from sqlalchemy.ext.asyncio import AsyncSession

from app.errors import Conflict, InvalidCredentials, NotFound
from app.models import Article, User
from app.repositories import article_repo, user_repo
from app.repositories.article_repo import ArticleFilter
from app.schemas import (
    ArticleCreate,
    ArticleStatus,
    ArticleUpdate,
    LoginRequest,
    Pagination,
    RegisterRequest,
)
from app.services import article_service, auth_service
from app.services.article_service import empty_result_message
from app.security import decode_access_token, verify_password
from conftest import make_user


# ---------------------------------------------------------------------------
# Pagination / messages (pure)
# ---------------------------------------------------------------------------

@pytest.mark.parametrize("page, limit, total, expected", [
    (1, 10, 0, (0, False, False)),
    (1, 10, 10, (1, False, False)),
    (1, 10, 11, (2, True, False)),
    (2, 10, 11, (2, False, True)),
    (3, 2, 5, (3, False, True)),
    (4, 2, 5, (3, False, True)),
    (2, 1, 3, (3, True, True)),
])
def test_pagination_build(page, limit, total, expected):
    meta = Pagination.build(page=page, limit=limit, total_items=total)
    assert (meta.total_pages, meta.has_next_page, meta.has_prev_page) == expected
    assert meta.current_page == page
    assert meta.total_items == total
    assert meta.limit == limit


def test_pagination_dumps_camel_case():
    dumped = Pagination.build(page=1, limit=10, total_items=0).model_dump(by_alias=True)
    assert set(dumped) == {
        "currentPage", "totalPages", "totalItems", "hasNextPage", "hasPrevPage", "limit",
    }


def test_empty_result_message_prefers_search_over_status():
    assert empty_result_message(ArticleStatus.DRAFT, "go") == 'No articles found matching "go"'
    assert empty_result_message(ArticleStatus.DRAFT, None) == "No draft articles found"
    assert empty_result_message(None, None) == "No articles found"


# ---------------------------------------------------------------------------
# article_repo
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_find_articles_returns_rows_and_total(db_session: AsyncSession):
    owner = await make_user(db_session, "owner")
    for i in range(5):
        await article_repo.add_article(db_session, owner.id, f"Row {i}", "Body", "draft")
    db_session.expire_all()

    rows, total = await article_repo.find_articles(
        db_session, ArticleFilter(owner_id=owner.id), limit=2, offset=2
    )
    assert total == 5
    assert len(rows) == 2
    assert all(isinstance(r, Article) for r in rows)
    assert all(r.user.username == "owner" for r in rows)


@pytest.mark.asyncio
async def test_find_articles_filter_is_owner_scoped(db_session: AsyncSession):
    mine = await make_user(db_session, "mine")
    theirs = await make_user(db_session, "theirs")
    await article_repo.add_article(db_session, mine.id, "Golang mine", "B", "published")
    await article_repo.add_article(db_session, theirs.id, "Golang theirs", "B", "published")

    rows, total = await article_repo.find_articles(
        db_session,
        ArticleFilter(owner_id=mine.id, status="published", search="GOLANG"),
        limit=10,
        offset=0,
    )
    assert total == 1
    assert [r.title for r in rows] == ["Golang mine"]


def test_article_filter_clauses_only_include_given_predicates():
    assert len(ArticleFilter(owner_id=1).clauses()) == 1
    assert len(ArticleFilter(owner_id=1, status="draft").clauses()) == 2
    assert len(ArticleFilter(owner_id=1, status="draft", search="x").clauses()) == 3


@pytest.mark.asyncio
async def test_get_owned_article_requires_matching_owner(db_session: AsyncSession):
    owner = await make_user(db_session, "owner")
    other = await make_user(db_session, "other")
    article = await article_repo.add_article(db_session, owner.id, "T", "B", "draft")

    assert await article_repo.get_owned_article(db_session, article.id, other.id) is None
    found = await article_repo.get_owned_article(db_session, article.id, owner.id)
    assert found is not None
    assert found.created_at is not None
    assert found.user.id == owner.id


@pytest.mark.asyncio
async def test_owner_is_never_lazy_loaded(db_session: AsyncSession):
    """Relationships must be loaded explicitly; touching an unloaded one fails loudly."""
    owner = await make_user(db_session, "owner")
    article = await article_repo.add_article(db_session, owner.id, "T", "B", "draft")
    with pytest.raises(InvalidRequestError):
        article.user


@pytest.mark.asyncio
async def test_out_of_range_lookups_return_nothing(db_session: AsyncSession):
    owner = await make_user(db_session, "owner")
    assert await article_repo.get_owned_article(db_session, 2**40, owner.id) is None
    rows, total = await article_repo.find_articles(
        db_session, ArticleFilter(owner_id=owner.id), limit=10, offset=2**64
    )
    assert (rows, total) == ([], 0)


# ---------------------------------------------------------------------------
# article_service
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_create_article_via_service(db_session: AsyncSession):
    user = await make_user(db_session)
    result = await article_service.create_article(
        db_session, user, ArticleCreate(title="Service", body="Content")
    )
    assert result["title"] == "Service"
    assert result["status"] == "draft"
    assert result["user"] == {"id": user.id, "username": "svcuser", "email": "svcuser@example.com"}
    assert "password_hash" not in result["user"]


@pytest.mark.asyncio
async def test_list_articles_via_service(db_session: AsyncSession):
    user = await make_user(db_session)
    for i in range(3):
        await article_service.create_article(
            db_session, user, ArticleCreate(title=f"Article {i}", body="B")
        )
    message, data = await article_service.list_articles(db_session, user, page=1, limit=2)
    assert message == "Articles retrieved successfully"
    assert len(data["articles"]) == 2
    assert data["pagination"]["totalItems"] == 3
    assert data["pagination"]["totalPages"] == 2
    assert data["pagination"]["hasNextPage"] is True


@pytest.mark.asyncio
async def test_list_articles_empty_with_status(db_session: AsyncSession):
    user = await make_user(db_session)
    message, data = await article_service.list_articles(
        db_session, user, status=ArticleStatus.PUBLISHED
    )
    assert message == "No published articles found"
    assert data["articles"] == []
    assert data["pagination"]["totalPages"] == 0


@pytest.mark.asyncio
async def test_update_merges_fields(db_session: AsyncSession):
    user = await make_user(db_session)
    created = await article_service.create_article(
        db_session, user, ArticleCreate(title="T", body="B")
    )
    updated = await article_service.update_article(
        db_session, user, created["id"], ArticleUpdate(body="New body")
    )
    assert (updated["title"], updated["body"], updated["status"]) == ("T", "New body", "draft")

    stored = (await db_session.execute(select(Article).where(Article.id == created["id"]))).scalar_one()
    assert stored.body == "New body"
    assert stored.title == "T"


def test_update_schema_treats_blank_as_unset():
    data = ArticleUpdate(title="", body="", status="")
    assert data.title is None
    assert data.body is None
    assert data.status is None


@pytest.mark.asyncio
async def test_foreign_article_operations_raise_not_found(db_session: AsyncSession):
    owner = await make_user(db_session, "owner")
    intruder = await make_user(db_session, "intruder")
    created = await article_service.create_article(
        db_session, owner, ArticleCreate(title="T", body="B")
    )

    with pytest.raises(NotFound):
        await article_service.get_article(db_session, intruder, created["id"])
    with pytest.raises(NotFound):
        await article_service.update_article(db_session, intruder, created["id"], ArticleUpdate(title="X"))
    with pytest.raises(NotFound):
        await article_service.delete_article(db_session, intruder, created["id"])

    assert (await article_service.get_article(db_session, owner, created["id"]))["title"] == "T"


@pytest.mark.asyncio
async def test_delete_article_via_service(db_session: AsyncSession):
    user = await make_user(db_session)
    created = await article_service.create_article(
        db_session, user, ArticleCreate(title="T", body="B")
    )
    await article_service.delete_article(db_session, user, created["id"])
    with pytest.raises(NotFound):
        await article_service.get_article(db_session, user, created["id"])


# ---------------------------------------------------------------------------
# auth_service / user_repo
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_register_stores_hash_not_password(db_session: AsyncSession):
    result = await auth_service.register(
        db_session, RegisterRequest(username="hasher", email="hasher@example.com", password="secret1")
    )
    user = await user_repo.get_by_username(db_session, "hasher")
    assert user.password_hash != "secret1"
    assert verify_password("secret1", user.password_hash)

    identity = decode_access_token(result["token"])
    assert identity.id == user.id
    assert identity.username == "hasher"


@pytest.mark.asyncio
async def test_register_conflict(db_session: AsyncSession):
    await auth_service.register(
        db_session, RegisterRequest(username="taken", email="taken@example.com", password="secret1")
    )
    assert await user_repo.exists_with_username_or_email(db_session, "someone", "taken@example.com")
    with pytest.raises(Conflict):
        await auth_service.register(
            db_session, RegisterRequest(username="other", email="taken@example.com", password="secret1")
        )


@pytest.mark.asyncio
async def test_login_raises_same_error_for_both_failures(db_session: AsyncSession):
    await auth_service.register(
        db_session, RegisterRequest(username="known", email="known@example.com", password="secret1")
    )
    with pytest.raises(InvalidCredentials) as wrong_password:
        await auth_service.login(db_session, LoginRequest(username="known", password="wrong!"))
    with pytest.raises(InvalidCredentials) as unknown_user:
        await auth_service.login(db_session, LoginRequest(username="unknown", password="secret1"))
    assert wrong_password.value.message == unknown_user.value.message


@pytest.mark.asyncio
async def test_add_user_loads_created_at(db_session: AsyncSession):
    user = await user_repo.add_user(db_session, "fresh", "fresh@example.com", "hash")
    assert isinstance(user, User)
    assert user.created_at is not None
