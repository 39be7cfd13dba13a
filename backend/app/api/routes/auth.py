"""
Authentication endpoint: token issuance.
"""

from fastapi import APIRouter

from app.schemas.auth import TokenRequest, Token
from app.services.auth_service import issue_token

router = APIRouter(prefix="/auth", tags=["Authentication"])


@router.post("/jwt", response_model=Token)
async def create_token(token_request: TokenRequest):
    """Issue a JWT for the given email. Valid for ACCESS_TOKEN_EXPIRE_MINUTES."""
    return Token(access_token=issue_token(token_request.email))
