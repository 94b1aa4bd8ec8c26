"""
Pydantic schemas for job records.
"""
from datetime import date, time
from decimal import Decimal
from typing import Literal, Optional
from pydantic import BaseModel, Field

JobPriority = Literal["low", "medium", "high", "urgent"]
JobStatus = Literal["pending", "scheduled", "in_progress", "completed", "cancelled"]


class JobCreate(BaseModel):
    """Schema for creating a job from an imported row."""
    title: str = Field(..., description="Job title")
    description: Optional[str] = None
    client_id: Optional[str] = Field(None, description="Matched client, if the name was found")
    job_type: Optional[str] = None
    priority: JobPriority = "medium"
    status: JobStatus = "pending"
    scheduled_date: Optional[date] = None
    scheduled_time: Optional[time] = None
    estimated_duration: int = Field(60, description="Estimated duration in minutes")
    estimated_cost: Optional[Decimal] = None
    address: Optional[str] = None


class JobSummary(BaseModel):
    """Existing job fields used for duplicate detection."""
    id: str
    title: str
    scheduled_date: Optional[date] = None

    class Config:
        """Pydantic config."""
        from_attributes = True
