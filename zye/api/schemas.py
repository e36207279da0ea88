"""
Link Record and API Response Schemas

This module defines the Pydantic models shared by the store, the services
and the endpoints.

Design Principles:
- LinkRecord mirrors the JSON document kept in the link store; the
  camelCase keys written by the creation side are accepted as aliases
- Unknown keys are ignored so older records keep resolving
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class LinkMeta(BaseModel):
    """Operator-supplied social preview overrides."""
    model_config = ConfigDict(extra="ignore")

    title: Optional[str] = None
    description: Optional[str] = None
    image: Optional[str] = None

    def has_custom_values(self) -> bool:
        return bool(self.title or self.description or self.image)


class LinkRecord(BaseModel):
    """A stored short link."""
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    url: str = Field(..., description="Destination URL")
    password: Optional[str] = Field(default=None, description="SHA-256 hex digest of the password")
    exp: Optional[str] = Field(default=None, description="Expiration timestamp (ISO 8601)")
    meta: Optional[LinkMeta] = None
    code: Optional[str] = Field(default=None, description="Short code, filled from the store key")
    creator: Optional[str] = None
    user_agent: Optional[str] = Field(default=None, alias="userAgent")
    created_at: Optional[str] = Field(default=None, alias="createdAt")


class MessageResponse(BaseModel):
    """Envelope for JSON management responses."""
    success: bool
    message: str
