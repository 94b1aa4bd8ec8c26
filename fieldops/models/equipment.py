"""
Database model for the equipment registry.
"""
from sqlalchemy import Column, Date, ForeignKey, Index, String, Text
from sqlalchemy.orm import relationship

from fieldops.models.base import Base, TenantMixin


class EquipmentStatus:
    ACTIVE = "active"
    INACTIVE = "inactive"
    MAINTENANCE = "maintenance"


class Equipment(TenantMixin, Base):
    """A serviced unit installed at a client site."""

    equipment_type = Column(String, nullable=False)
    brand = Column(String, nullable=True)
    model = Column(String, nullable=True)
    serial_number = Column(String, nullable=True)
    client_id = Column(String, ForeignKey("client.id", ondelete="SET NULL"), nullable=True, index=True)
    install_date = Column(Date, nullable=True)
    warranty_expiry = Column(Date, nullable=True)
    status = Column(String, nullable=False, default=EquipmentStatus.ACTIVE)
    location_notes = Column(Text, nullable=True)

    client = relationship("Client", back_populates="equipment")

    __table_args__ = (
        Index("ix_equipment_tenant_serial", "tenant_id", "serial_number"),
    )
