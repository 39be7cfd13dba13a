"""
Token issuance. Identity is the caller's email; there is no password store.
"""

from app.core.security import create_access_token
from app.core.logging import get_logger

logger = get_logger(__name__)


def issue_token(email: str) -> str:
    """Sign an access token whose subject is `email`."""
    token = create_access_token(data={"sub": email})
    logger.info("token_issued", email=email)
    return token
