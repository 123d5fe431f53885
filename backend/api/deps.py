import logging
from fastapi import Depends, HTTPException, status
from fastapi.security import APIKeyHeader
from jose import jwt, JWTError, ExpiredSignatureError
from config import get_settings

logger = logging.getLogger(__name__)
settings = get_settings()

# Raw header rather than HTTPBearer so a missing token and a malformed one can be told apart
authorization_header = APIKeyHeader(name="Authorization", auto_error=False)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=f"Authentication failed! {detail}",
        headers={"WWW-Authenticate": "Bearer"},
    )


def decode_token(token: str) -> int:
    """Return the user id carried by a bearer token, or raise a 401."""
    try:
        payload = jwt.decode(token, settings.JWT_SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
    except ExpiredSignatureError:
        raise _unauthorized("Token has expired. Please login again.")
    except JWTError as e:
        logger.warning(f"Rejected token: {e}")
        raise _unauthorized("Invalid token.")

    try:
        return int(payload["sub"])
    except (KeyError, TypeError, ValueError):
        raise _unauthorized("Invalid token.")


async def get_current_user_id(header: str | None = Depends(authorization_header)) -> int:
    if not header:
        raise _unauthorized("No token provided.")

    scheme, _, token = header.strip().partition(" ")
    token = token.strip()
    if scheme.lower() != "bearer" or not token:
        raise _unauthorized("Invalid token format.")

    return decode_token(token)
