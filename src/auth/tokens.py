# src/auth/tokens.py
"""Access token helpers. Login itself belongs to the identity provider."""

from datetime import datetime, timedelta, timezone
from uuid import UUID

import jwt

from src.common.config import settings
from src.models.models import UserRole


def create_access_token(user_id: UUID, role: UserRole, expires_delta: timedelta = None) -> str:
    """Create a JWT token including an expiration date."""
    expire = datetime.now(timezone.utc) + (
        expires_delta if expires_delta else timedelta(minutes=settings.JWT_EXPIRATION_MINUTES)
    )
    to_encode = {"sub": str(user_id), "role": role.value, "exp": expire}
    return jwt.encode(to_encode, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)
