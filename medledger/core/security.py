from datetime import datetime, timedelta
from typing import Optional
from jose import JWTError, jwt
from fastapi import HTTPException, status
from fastapi.security import HTTPBearer
from pydantic import BaseModel

from .config import settings

# JWT Security
security = HTTPBearer(auto_error=False)

# Participant identifiers are opaque strings issued by the identity layer
ParticipantId = str

class TokenPayload(BaseModel):
    sub: Optional[str] = None
    exp: Optional[int] = None
    token_type: Optional[str] = None

# JWT utilities
def create_access_token(
    participant_id: ParticipantId,
    expires_delta: Optional[timedelta] = None
) -> str:
    """Create a JWT access token identifying a participant.

    The ledger only verifies tokens; issuing lives with the identity provider.
    This helper exists for that provider, local tooling and tests.
    """
    if expires_delta:
        expire = datetime.utcnow() + expires_delta
    else:
        expire = datetime.utcnow() + timedelta(
            minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES
        )

    to_encode = {
        "sub": participant_id,
        "exp": expire,
        "token_type": "access"
    }

    encoded_jwt = jwt.encode(
        to_encode,
        settings.SECRET_KEY,
        algorithm=settings.ALGORITHM
    )
    return encoded_jwt

def verify_token(token: str) -> Optional[TokenPayload]:
    """Verify and decode JWT token."""
    try:
        payload = jwt.decode(
            token,
            settings.SECRET_KEY,
            algorithms=[settings.ALGORITHM]
        )

        return TokenPayload(**payload)

    except JWTError:
        return None

# Security exceptions
class AuthenticationError(HTTPException):
    def __init__(self, detail: str = "Could not validate credentials"):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            headers={"WWW-Authenticate": "Bearer"},
        )
