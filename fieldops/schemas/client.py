"""
Pydantic schemas for client records.
"""
from typing import Optional
from pydantic import BaseModel, Field


class ClientBase(BaseModel):
    """Base schema for client data."""
    name: str = Field(..., description="Client or company name")
    email: Optional[str] = Field(None, description="Contact email (lower-cased)")
    phone: Optional[str] = Field(None, description="Phone number, E.164 when it could be parsed")
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = None
    notes: Optional[str] = None


class ClientCreate(ClientBase):
    """Schema for creating a client from an imported row."""


class ClientSummary(BaseModel):
    """Existing client fields used for matching imported rows."""
    id: str
    name: str
    email: Optional[str] = None

    class Config:
        """Pydantic config."""
        from_attributes = True
