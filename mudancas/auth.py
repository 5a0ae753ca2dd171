import logging
from typing import Iterable, Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import ExpiredSignatureError, JWTError
from sqlalchemy.orm import Session

from . import models
from .database import get_db
from .errors import Forbidden, Unauthenticated
from .utils import decode_jwt

bearer_scheme = HTTPBearer(auto_error=False)


def resolve_user(db: Session, token: Optional[str]) -> models.User:
    """Map a bearer token to its user or raise ``Unauthenticated``."""
    if not token:
        raise Unauthenticated("Access token required")
    try:
        payload = decode_jwt(token)
    except ExpiredSignatureError:
        logging.warning("Rejected expired access token")
        raise Unauthenticated("Access token expired")
    except JWTError:
        logging.warning("Rejected malformed access token")
        raise Unauthenticated("Invalid access token")

    try:
        user_id = int(payload.get("sub"))
    except (TypeError, ValueError):
        raise Unauthenticated("Invalid access token")

    user = db.get(models.User, user_id)
    if user is None:
        logging.warning("Access token for unknown user %s", user_id)
        raise Unauthenticated("Invalid access token")
    return user


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> models.User:
    return resolve_user(db, credentials.credentials if credentials else None)


def require_role(user: models.User, allowed: Iterable[models.Role], detail: Optional[str] = None) -> None:
    if user.role not in set(allowed):
        raise Forbidden(detail)
