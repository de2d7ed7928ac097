from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models import User


async def get_by_username(db: AsyncSession, username: str) -> User | None:
    result = await db.execute(select(User).where(User.username == username))
    return result.scalar_one_or_none()


async def exists_with_username_or_email(db: AsyncSession, username: str, email: str) -> bool:
    q = select(User.id).where(or_(User.username == username, User.email == email)).limit(1)
    result = await db.execute(q)
    return result.scalar_one_or_none() is not None


async def add_user(db: AsyncSession, username: str, email: str, password_hash: str) -> User:
    """
    Insert a user and load its server-assigned ``created_at``.

    Raises ``sqlalchemy.exc.IntegrityError`` if a concurrent request won
    the race for the same username or email.
    """
    user = User(username=username, email=email, password_hash=password_hash)
    db.add(user)
    await db.flush()
    await db.refresh(user, attribute_names=["created_at"])
    return user
