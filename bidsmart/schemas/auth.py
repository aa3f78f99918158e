"""Authentication schemas for Supabase JWT tokens."""

from typing import Any, Dict, Optional
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field


class JWTClaims(BaseModel):
    """JWT claims extracted from a Supabase access token."""

    sub: str = Field(..., description="Subject (user ID)")
    email: Optional[str] = Field(None, description="User email")
    role: str = Field(default="authenticated", description="User role")
    exp: int = Field(..., description="Expiration timestamp")
    iat: Optional[int] = Field(None, description="Issued at timestamp")
    iss: Optional[str] = Field(None, description="Token issuer")
    aud: Optional[str] = Field(None, description="Audience")
    app_metadata: Optional[Dict[str, Any]] = Field(None, description="Application metadata")
    user_metadata: Optional[Dict[str, Any]] = Field(None, description="User metadata")
    session_id: Optional[str] = Field(None, description="Session ID")


class CurrentUser(BaseModel):
    """Current authenticated user information."""

    id: str = Field(..., description="Supabase user ID")
    email: Optional[str] = Field(None, description="User email")
    role: str = Field(default="authenticated", description="User role")
    app_metadata: Optional[Dict[str, Any]] = Field(None, description="Application metadata")
    user_metadata: Optional[Dict[str, Any]] = Field(None, description="User metadata")

    @property
    def user_id(self) -> UUID:
        """Supabase user id as a UUID, matching ``projects.user_id``."""
        return UUID(self.id)


class AdminLoginRequest(BaseModel):
    """Admin dashboard credentials."""

    email: str = Field(..., min_length=1, description="Admin email")
    password: str = Field(..., min_length=1, description="Admin password")


class AdminIdentity(BaseModel):
    """Admin allowed past ``require_admin``, from a login session or a Supabase token."""

    id: Optional[str] = Field(None, description="admin_users id, or the Supabase user id")
    email: Optional[str] = Field(None, description="Admin email")
    name: Optional[str] = Field(None, description="Display name")
    is_super_admin: bool = Field(default=False, description="Super admin flag of the admin account")


class VerificationCodeRequest(BaseModel):
    email: EmailStr


class VerifyCodeRequest(BaseModel):
    email: EmailStr
    code: str = Field(..., min_length=6, max_length=6, pattern=r"^\d{6}$")


__all__ = [
    "JWTClaims",
    "CurrentUser",
    "AdminLoginRequest",
    "AdminIdentity",
    "VerificationCodeRequest",
    "VerifyCodeRequest",
]
