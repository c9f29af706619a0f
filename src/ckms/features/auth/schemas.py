"""Pydantic schemas for bearer-token claims and the authenticated caller."""

from pydantic import BaseModel, ConfigDict, Field, EmailStr
from typing import Optional


class AppMetadata(BaseModel):
    chain_id: Optional[int] = Field(None, description="Chain the user belongs to")
    role: Optional[str] = Field(None, description="User role (e.g. admin, manager, store_staff)")
    store_id: Optional[int] = Field(None, description="Home store for store-level users")


class TokenPayload(BaseModel):
    sub: Optional[str] = None
    email: Optional[str] = None
    app_metadata: AppMetadata = Field(default_factory=AppMetadata)


class AuthUser(BaseModel):
    id: str = Field(..., description="Subject of the token")
    email: Optional[EmailStr] = Field(None, description="User email address")
    chain_id: int = Field(..., description="Chain used to scope every query")
    role: str
    store_id: Optional[int] = None

    model_config = ConfigDict(frozen=True)
