from datetime import datetime, timedelta, timezone
import os
from typing import Optional

from dotenv import load_dotenv
from jose import jwt
from passlib.context import CryptContext

load_dotenv()

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


def _signing_config():
    secret = os.getenv("SECRET_KEY")
    if not secret:
        raise RuntimeError("SECRET_KEY is not configured")
    return secret, os.getenv("ALGORITHM", "HS256")


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    return pwd_context.verify(password, password_hash)


def create_jwt(data: dict, expires_minutes: Optional[int] = None) -> str:
    if expires_minutes is None:
        expires_minutes = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "10080"))
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + timedelta(minutes=expires_minutes)
    to_encode.update({"exp": expire})
    secret, algorithm = _signing_config()
    return jwt.encode(to_encode, secret, algorithm=algorithm)


def decode_jwt(token: str) -> dict:
    """Verify signature and expiry. Raises ``jose.JWTError`` on failure."""
    secret, algorithm = _signing_config()
    return jwt.decode(token, secret, algorithms=[algorithm])


def issue_access_token(user) -> str:
    return create_jwt({"sub": str(user.id), "role": user.role.value})
