from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

import jwt
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from flowboard.config import settings
from flowboard.exceptions import UnauthorizedError

_bearer = HTTPBearer()

ALGORITHM = "HS256"


@dataclass(frozen=True)
class Session:
    """The authenticated caller, passed explicitly to every service call."""

    user_id: str
    email: str


def create_access_token(user_id: str, email: str) -> str:
    expire = datetime.now(UTC) + timedelta(minutes=settings.jwt_expire_minutes)
    payload = {"sub": user_id, "email": email, "exp": expire}
    return jwt.encode(payload, settings.jwt_secret, algorithm=ALGORITHM)


def decode_access_token(token: str) -> Session:
    try:
        payload = jwt.decode(token, settings.jwt_secret, algorithms=[ALGORITHM])
    except jwt.ExpiredSignatureError:
        raise UnauthorizedError("Token has expired") from None
    except jwt.InvalidTokenError:
        raise UnauthorizedError("Invalid token") from None

    user_id = payload.get("sub")
    if not user_id:
        raise UnauthorizedError("Invalid token")
    return Session(user_id=user_id, email=payload.get("email", ""))


async def verify_token(
    credentials: HTTPAuthorizationCredentials = Depends(_bearer),  # noqa: B008
) -> Session:
    return decode_access_token(credentials.credentials)
