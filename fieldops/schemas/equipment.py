"""
Pydantic schemas for equipment records.
"""
from datetime import date
from typing import Literal, Optional
from pydantic import BaseModel, Field

EquipmentStatus = Literal["active", "inactive", "maintenance"]


class EquipmentCreate(BaseModel):
    """Schema for registering equipment from an imported row."""
    equipment_type: str = Field(..., description="Kind of unit, e.g. 'Air Conditioner'")
    brand: Optional[str] = None
    model: Optional[str] = None
    serial_number: Optional[str] = None
    client_id: Optional[str] = Field(None, description="Matched owner, if the name was found")
    install_date: Optional[date] = None
    warranty_expiry: Optional[date] = None
    status: EquipmentStatus = "active"
    location_notes: Optional[str] = None
