# salon_booking/models/tenant.py
"""
Tenant Model - one salon.
Only the fields the scheduling engine reads are modelled here.
"""
from sqlalchemy import Column, String, Boolean, DateTime, JSON, Uuid
from sqlalchemy.sql import func
import uuid

from salon_booking.config.settings import get_settings
from salon_booking.models.base import Base


class Tenant(Base):
    __tablename__ = "tenants"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String(200), nullable=False)

    # Fixed operating timezone; every local date/time is read in it
    timezone = Column(String(50), nullable=False, default=lambda: get_settings().DEFAULT_TIMEZONE)

    # Canonical WeeklySchedule form (see scheduling.working_hours)
    working_hours = Column(JSON, nullable=True)

    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    def __repr__(self):
        return f"<Tenant(id={self.id}, name={self.name})>"

    def to_dict(self):
        return {
            "id": str(self.id),
            "name": self.name,
            "timezone": self.timezone,
            "working_hours": self.working_hours,
            "is_active": self.is_active,
        }
