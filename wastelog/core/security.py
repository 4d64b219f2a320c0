"""Password hashing and bearer-token actor resolution."""

from datetime import datetime, timedelta, timezone
from typing import Any

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from passlib.context import CryptContext
from sqlalchemy.orm import Session

from wastelog.core.config import settings
from wastelog.db.session import get_db
from wastelog.models.user import User
from wastelog.services.user_service import get_user_by_id

pwd_context: CryptContext = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")
bearer_scheme: HTTPBearer = HTTPBearer(auto_error=True)


def get_password_hash(password: str) -> str:
    """Hash a plaintext password."""
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a plaintext password against its hash."""
    return pwd_context.verify(plain_password, hashed_password)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def create_access_token(user: User) -> str:
    """Sign a token carrying the actor's id, role and branch."""
    issued_at = datetime.now(timezone.utc)
    claims: dict[str, Any] = {
        "sub": str(user.id),
        "role": user.role,
        "branch_id": user.branch_id,
        "iat": issued_at,
        "exp": issued_at + timedelta(minutes=settings.jwt_expire_minutes),
    }
    return jwt.encode(claims, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> dict[str, Any]:
    """Decode and validate a token; 401 on bad signature, expiry or shape."""
    try:
        claims: dict[str, Any] = jwt.decode(
            token,
            settings.jwt_secret_key,
            algorithms=[settings.jwt_algorithm],
        )
    except JWTError as exc:
        raise _unauthorized("Could not validate credentials") from exc

    try:
        claims["sub"] = int(claims["sub"])
    except (KeyError, TypeError, ValueError) as exc:
        raise _unauthorized("Invalid authentication token") from exc
    return claims


def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> User:
    """Resolve the acting user from the Authorization header.

    Tokens issued before a role or branch reassignment stop working, so the
    scope checks always see the actor's current attributes.
    """
    claims = decode_access_token(credentials.credentials)
    user: User | None = get_user_by_id(db=db, user_id=claims["sub"])
    if user is None or not user.is_active:
        raise _unauthorized("User not found")
    if claims.get("role") != user.role or claims.get("branch_id") != user.branch_id:
        raise _unauthorized("Token no longer matches account; log in again")
    return user
