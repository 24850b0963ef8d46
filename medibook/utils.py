import jwt
from datetime import datetime, timedelta, timezone
from typing import Optional
from .config import settings


# =========================
# JWT Token Handling
# =========================
def create_access_token(subject: str, role: str, expires_minutes: Optional[int] = None) -> str:
    """Create a JWT access token carrying the subject id and its role"""
    if not settings.secret_configured:
        raise ValueError("SECRET_KEY not properly configured")

    expire = utcnow() + timedelta(minutes=expires_minutes or settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    to_encode = {"sub": str(subject), "role": role, "exp": expire, "type": "access"}
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)

def decode_access_token(token: str) -> Optional[dict]:
    """Decode and verify JWT token"""
    if not settings.secret_configured:
        return None
    try:
        return jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except jwt.ExpiredSignatureError:
        return None
    except jwt.InvalidTokenError:
        return None

def utcnow() -> datetime:
    """Timezone-aware UTC now; every stored timestamp goes through this"""
    return datetime.now(timezone.utc)
