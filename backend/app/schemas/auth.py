"""
Pydantic schemas for token issuance.
"""

from pydantic import BaseModel, EmailStr


class TokenRequest(BaseModel):
    email: EmailStr


class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"
