"""
Authentication and authorization.

Protected routes depend on ``get_current_identity`` which verifies an
``Authorization: Bearer <jwt>`` header and yields the decoded Identity.
Admin-only routes additionally depend on ``require_admin``, which re-reads
the caller's user record so a demoted admin loses access immediately.
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from loguru import logger
from passlib.hash import bcrypt
from pydantic import BaseModel, EmailStr, TypeAdapter, ValidationError

from config import Settings
from database import Store
from errors import Forbidden, Unauthorized, store_errors
from schemas import Role

_bearer = HTTPBearer(auto_error=False)
_email_adapter = TypeAdapter(EmailStr)

# passlib refuses longer secrets
MAX_PASSWORD_LENGTH = 4096


class Identity(BaseModel):
    id: str
    email: str
    name: Optional[str] = None
    role: Optional[str] = None
    photo: Optional[str] = None


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_store(request: Request) -> Store:
    return request.app.state.store


def hash_password(password: str) -> str:
    return bcrypt.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    if not password or not password_hash:
        return False
    try:
        return bcrypt.verify(password, password_hash)
    except ValueError:
        # stored value is not a bcrypt hash
        return False


def create_access_token(data: Dict[str, Any], settings: Settings, expires_delta: Optional[timedelta] = None) -> str:
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(days=settings.token_expire_days))
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str, settings: Settings) -> Dict[str, Any]:
    return jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])


def get_current_identity(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(_bearer),
    settings: Settings = Depends(get_settings),
) -> Identity:
    if credentials is None or not credentials.credentials:
        raise Unauthorized()

    try:
        payload = decode_access_token(credentials.credentials, settings)
        return Identity(**payload)
    except (JWTError, ValidationError) as e:
        logger.debug("Rejected bearer token: {}", e)
        raise Unauthorized()


def get_optional_identity(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(_bearer),
    settings: Settings = Depends(get_settings),
) -> Optional[Identity]:
    """Like get_current_identity, but anonymous callers get None."""
    if credentials is None:
        return None
    return get_current_identity(credentials, settings)


def is_admin_email(store: Store, email: str) -> bool:
    with store_errors("checking admin role"):
        user = store.users.find_one({"email": email}, {"role": 1})
    return bool(user) and user.get("role") == Role.admin.value


def require_admin(
    identity: Identity = Depends(get_current_identity),
    store: Store = Depends(get_store),
) -> Identity:
    if not is_admin_email(store, identity.email):
        raise Forbidden()
    return identity


def require_same_email(email: str, identity: Identity) -> str:
    """Reject requests whose path/query email is not the caller's own.

    The email is normalized the same way EmailStr normalizes it on
    registration, so ``Bob@Example.COM`` matches ``Bob@example.com``.
    Returns the normalized email.
    """
    try:
        normalized = _email_adapter.validate_python(email)
    except ValidationError:
        raise Forbidden()
    if normalized != identity.email:
        raise Forbidden()
    return normalized
