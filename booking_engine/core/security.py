from dataclasses import dataclass

from jose import JWTError, jwt

from booking_engine.core.config import settings
from booking_engine.domain.entities import UserRole


@dataclass(frozen=True)
class Actor:
    """The authenticated caller as seen by the booking use cases."""

    id: str
    role: UserRole


def decode_access_token(token: str) -> Actor | None:
    """Returns the actor from a valid access token, or None."""
    try:
        payload = jwt.decode(
            token, settings.secret_key, algorithms=[settings.algorithm]
        )
    except JWTError:
        return None
    if payload.get("type", "access") != "access":
        return None
    sub = payload.get("sub")
    if not sub:
        return None
    try:
        role = UserRole(str(payload.get("role", UserRole.USER.value)).upper())
    except ValueError:
        return None
    return Actor(id=str(sub), role=role)
