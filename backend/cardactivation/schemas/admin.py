"""
Card Activation Backend — Admin Auth Schemas
==============================================
"""

from typing import Any, Optional

from pydantic import BaseModel, Field


class LoginRequest(BaseModel):
    username: Optional[Any] = Field(default=None)
    password: Optional[Any] = Field(default=None)


class LoginResponse(BaseModel):
    success: bool = Field(default=True)
    message: str = Field(default="Login successful")
    token: str = Field(description="Signed bearer token, valid for one hour")


class SessionClaims(BaseModel):
    """
    Decoded identity carried by a verified bearer token.

    Attributes:
        id:        AdminPrincipal.id as a string
        username:  AdminPrincipal.username at issuance time
        iat / exp: issued-at and expiry, seconds since the epoch
    """
    id: str
    username: str
    iat: int
    exp: int
