from datetime import datetime, timedelta, timezone

import bcrypt
from jose import JWTError, jwt

from retailpos.core.config import settings


def verify_password(plain_password: str, hashed_password: str) -> bool:
    try:
        return bcrypt.checkpw(plain_password.encode("utf-8"), hashed_password.encode("utf-8"))
    except ValueError:
        return False


def get_password_hash(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def create_access_token(user) -> str:
    """Bearer token carrying the user id, role and branch."""
    issued = datetime.now(timezone.utc)
    claims = {
        "sub": str(user.id),
        "role": user.role,
        "branch_id": user.branch_id,
        "iat": issued,
        "exp": issued + timedelta(minutes=settings.jwt_expires_minutes),
    }
    return jwt.encode(claims, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> dict:
    try:
        return jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    except JWTError as exc:
        raise ValueError("Geçersiz oturum anahtarı") from exc
