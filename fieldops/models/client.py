"""
Database model for clients.
"""
from sqlalchemy import Column, Index, String, Text
from sqlalchemy.orm import relationship

from fieldops.models.base import Base, TenantMixin


class Client(TenantMixin, Base):
    """A customer of the tenant's field-service business."""

    name = Column(String, nullable=False)
    email = Column(String, nullable=True)
    phone = Column(String, nullable=True)
    address = Column(String, nullable=True)
    city = Column(String, nullable=True)
    state = Column(String, nullable=True)
    zip_code = Column(String, nullable=True)
    notes = Column(Text, nullable=True)

    jobs = relationship("Job", back_populates="client")
    equipment = relationship("Equipment", back_populates="client")

    __table_args__ = (
        Index("ix_client_tenant_name", "tenant_id", "name"),
        Index("ix_client_tenant_email", "tenant_id", "email"),
    )
