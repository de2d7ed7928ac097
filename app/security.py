"""
Password hashing and bearer-token issuing/verification.

Hashing uses passlib's bcrypt scheme; tokens are HS256 JWTs signed with
``settings.SECRET_KEY`` carrying the user id (``sub``) and username.
Nothing outside this module knows about JWT: callers only see
``create_access_token`` and ``decode_access_token``.
"""
import logging
from datetime import datetime, timedelta, timezone

from jose import JWTError, jwt
from passlib.context import CryptContext

from app.config import settings
from app.errors import Unauthenticated
from app.schemas import CurrentUser

logger = logging.getLogger(__name__)

pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=settings.BCRYPT_ROUNDS,
)


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def dummy_verify() -> None:
    """Spend the same time as a real verification when there is no user."""
    pwd_context.dummy_verify()


def create_access_token(
    user_id: int,
    username: str,
    expires_delta: timedelta | None = None,
) -> str:
    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    now = datetime.now(timezone.utc)
    payload = {
        "sub": str(user_id),
        "username": username,
        "iat": now,
        "exp": now + expires_delta,
    }
    return jwt.encode(payload, settings.SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def decode_access_token(token: str) -> CurrentUser:
    """
    Verify *token* and return the identity it asserts.

    Raises ``Unauthenticated`` for bad signatures, expired tokens, garbage
    input and tokens without usable identity claims.
    """
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
    except JWTError as exc:
        logger.info("Rejected token: %s", exc)
        raise Unauthenticated() from exc

    sub = payload.get("sub")
    username = payload.get("username")
    if not sub or not username or not str(sub).isdigit():
        logger.info("Rejected token without identity claims")
        raise Unauthenticated()
    return CurrentUser(id=int(sub), username=username)
