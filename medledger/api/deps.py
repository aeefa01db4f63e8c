from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials
from typing import Optional

from ..core.security import (
    security, verify_token, AuthenticationError, TokenPayload, ParticipantId
)

async def get_current_participant_token(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)
) -> TokenPayload:
    """Extract and verify JWT token from Authorization header."""
    if credentials is None:
        raise AuthenticationError("Not authenticated")

    # Verify token
    token_payload = verify_token(credentials.credentials)
    if not token_payload:
        raise AuthenticationError("Invalid or expired token")

    # Check if token is access token
    if token_payload.token_type != "access":
        raise AuthenticationError("Invalid token type")

    return token_payload

async def get_current_participant(
    token_payload: TokenPayload = Depends(get_current_participant_token)
) -> ParticipantId:
    """Return the caller's participant id.

    Authentication happened upstream; the ledger trusts the verified ``sub``.
    """
    if not token_payload.sub:
        raise AuthenticationError("Invalid token payload")

    return token_payload.sub
