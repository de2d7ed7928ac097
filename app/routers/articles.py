from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from app.database import get_db
from app.dependencies import ArticleListParams, get_current_user
from app.errors import envelope
from app.schemas import ArticleCreate, ArticleUpdate, CurrentUser
from app.services import article_service

# Every route here sits behind the bearer-token gate.
router = APIRouter(
    prefix="/articles",
    tags=["articles"],
    dependencies=[Depends(get_current_user)],
)

@router.get("")
async def list_articles(
    params: ArticleListParams = Depends(),
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    message, data = await article_service.list_articles(
        db, user, params.page, params.limit, params.status, params.search
    )
    return envelope(message, data)

@router.get("/{article_id}")
async def get_article(
    article_id: int,
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    article = await article_service.get_article(db, user, article_id)
    return envelope("Article retrieved successfully", {"article": article})

@router.post("", status_code=201)
async def create_article(
    data: ArticleCreate,
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    article = await article_service.create_article(db, user, data)
    return envelope("Article created successfully", {"article": article})

@router.put("/{article_id}")
async def update_article(
    article_id: int,
    data: ArticleUpdate,
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    article = await article_service.update_article(db, user, article_id, data)
    return envelope("Article updated successfully", {"article": article})

@router.delete("/{article_id}")
async def delete_article(
    article_id: int,
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    await article_service.delete_article(db, user, article_id)
    return envelope("Article deleted successfully")
