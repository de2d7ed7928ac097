import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from app.config import settings
from app.database import Database
from app.errors import envelope, register_exception_handlers
from app.middleware import TimingMiddleware
from app.routers import articles, auth

VERSION = "1.0.0"

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    db: Database = app.state.db
    if settings.AUTO_CREATE_TABLES:
        await db.create_all()
        logger.info("Database tables ensured")
    yield
    await db.dispose()


def create_app(database: Database | None = None) -> FastAPI:
    """Build the API around *database*, or one built from settings."""
    logging.basicConfig(
        level=settings.LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app = FastAPI(
        title="Article Management API",
        description="Per-user article CRUD with token authentication",
        version=VERSION,
        lifespan=lifespan,
    )
    app.state.db = database or Database.from_settings()

    # Middleware
    app.add_middleware(TimingMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)

    # Routers
    app.include_router(auth.router)
    app.include_router(articles.router)

    @app.get("/health")
    async def health():
        return envelope(
            "Article Management API is running",
            {"status": "healthy", "version": VERSION},
        )

    return app


app = create_app()
