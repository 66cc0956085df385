from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import jwt
from jose.exceptions import JWTError
from pydantic import BaseModel

from motoshop.core.config import settings


class TokenPayload(BaseModel):
    """Model representing the legacy login token payload."""
    sub: Optional[str] = None
    exp: Optional[int] = None


class InvalidToken(Exception):
    pass


def create_legacy_token(username: str, expires_delta: Optional[timedelta] = None) -> str:
    """Sign a token for the username login. Stored only in a session cookie."""
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    )
    to_encode = {"sub": username, "exp": expire}
    return jwt.encode(to_encode, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def verify_legacy_token(token: str) -> TokenPayload:
    """Verify and decode a legacy login token."""
    try:
        payload = jwt.decode(
            token,
            settings.JWT_SECRET_KEY,
            algorithms=[settings.JWT_ALGORITHM]
        )
    except JWTError as e:
        # python-jose rejects expired tokens here as well
        raise InvalidToken(str(e)) from e
    token_data = TokenPayload(**payload)
    if token_data.sub is None:
        raise InvalidToken("Token has no subject")
    return token_data


def check_legacy_credentials(username: str, password: str) -> bool:
    """Compare against the configured account. Disabled when none is configured."""
    if not settings.LEGACY_LOGIN_USERNAME or not settings.LEGACY_LOGIN_PASSWORD:
        return False
    return username == settings.LEGACY_LOGIN_USERNAME and password == settings.LEGACY_LOGIN_PASSWORD
