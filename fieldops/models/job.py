"""
Database model for scheduled jobs.
"""
from sqlalchemy import Column, Date, ForeignKey, Index, Integer, Numeric, String, Text, Time
from sqlalchemy.orm import relationship

from fieldops.models.base import Base, TenantMixin


class JobPriority:
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"


class JobStatus:
    PENDING = "pending"
    SCHEDULED = "scheduled"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class Job(TenantMixin, Base):
    """A unit of work for a client."""

    title = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    client_id = Column(String, ForeignKey("client.id", ondelete="SET NULL"), nullable=True, index=True)
    job_type = Column(String, nullable=True)
    priority = Column(String, nullable=False, default=JobPriority.MEDIUM)
    status = Column(String, nullable=False, default=JobStatus.PENDING)
    scheduled_date = Column(Date, nullable=True)
    scheduled_time = Column(Time, nullable=True)
    estimated_duration = Column(Integer, nullable=False, default=60)  # minutes
    estimated_cost = Column(Numeric(12, 2), nullable=True)
    address = Column(String, nullable=True)

    client = relationship("Client", back_populates="jobs")

    __table_args__ = (
        Index("ix_job_tenant_title_date", "tenant_id", "title", "scheduled_date"),
    )
