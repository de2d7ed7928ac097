"""
Auth service — registration and login.

Login failures are deliberately uniform: an unknown username and a wrong
password raise the same ``InvalidCredentials`` and, thanks to
``dummy_verify``, take roughly the same time.
"""
import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.errors import Conflict, InvalidCredentials
from app.models import User
from app.repositories import user_repo
from app.schemas import LoginRequest, RegisterRequest
from app.security import create_access_token, dummy_verify, hash_password, verify_password

logger = logging.getLogger(__name__)


def _user_to_dict(user: User) -> dict:
    return {
        "id": user.id,
        "username": user.username,
        "email": user.email,
        "created_at": user.created_at.isoformat() if user.created_at else None,
    }


def _session_payload(user: User) -> dict:
    return {
        "user": _user_to_dict(user),
        "token": create_access_token(user.id, user.username),
    }


async def register(db: AsyncSession, data: RegisterRequest) -> dict:
    """
    Create a user and return ``{user, token}``.

    The pre-check gives the common case a clean error; the unique
    constraints still catch two registrations racing for the same name.
    """
    if await user_repo.exists_with_username_or_email(db, data.username, data.email):
        raise Conflict()

    try:
        user = await user_repo.add_user(
            db,
            username=data.username,
            email=data.email,
            password_hash=hash_password(data.password),
        )
    except IntegrityError as exc:
        raise Conflict() from exc

    logger.info("Registered user %s (%s)", user.id, user.username)
    return _session_payload(user)


async def login(db: AsyncSession, data: LoginRequest) -> dict:
    user = await user_repo.get_by_username(db, data.username)
    if user is None:
        dummy_verify()
        logger.warning("Failed login for %r", data.username)
        raise InvalidCredentials()

    if not verify_password(data.password, user.password_hash):
        logger.warning("Failed login for %r", data.username)
        raise InvalidCredentials()

    logger.info("User %s logged in", user.id)
    return _session_payload(user)
