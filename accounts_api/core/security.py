from datetime import datetime, timedelta, timezone
from jose import jwt
from passlib.context import CryptContext

from accounts_api.core.config import settings

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")

def hash_password(password: str) -> str:
    return pwd_context.hash(password)

def verify_password(password: str, password_hash: str) -> bool:
    if not password_hash:
        return False
    return pwd_context.verify(password, password_hash)

def create_jwt(payload: dict, expires_delta: timedelta | None = None) -> str:
    now = datetime.now(timezone.utc)
    ttl = expires_delta if expires_delta is not None else timedelta(days=settings.JWT_TTL_DAYS)
    data = payload.copy()
    data.update({"iat": int(now.timestamp()), "exp": int((now + ttl).timestamp())})
    return jwt.encode(data, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)

def decode_jwt(token: str) -> dict:
    """Decode and verify a token; raises ``jose.JWTError`` on any failure, expiry included."""
    return jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])
