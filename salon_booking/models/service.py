# salon_booking/models/service.py
"""
Service Model - bookable salon services
Each service belongs to one tenant and has a fixed duration.
"""
from sqlalchemy import Column, String, Integer, ForeignKey, Boolean, DateTime, Table, Uuid
from sqlalchemy.sql import func
import uuid

from salon_booking.models.base import Base


# Association table: which stylist is qualified for which service.
# last_completed_at / total_completed are the per-service turn counters.
stylist_services = Table(
    "stylist_services",
    Base.metadata,
    Column("user_id", Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
    Column("service_id", Uuid(as_uuid=True), ForeignKey("services.id", ondelete="CASCADE"), primary_key=True),
    Column("last_completed_at", DateTime(timezone=True), nullable=True),
    Column("total_completed", Integer, nullable=False, default=0),
)


class Service(Base):
    __tablename__ = "services"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    tenant_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("tenants.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )

    name = Column(String(200), nullable=False)
    duration_minutes = Column(Integer, nullable=False)

    is_active = Column(Boolean, default=True, index=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now()
    )

    def __repr__(self):
        return f"<Service(id={self.id}, name={self.name}, tenant_id={self.tenant_id})>"

    def to_dict(self):
        """Convert to dictionary for API responses"""
        return {
            "id": str(self.id),
            "tenant_id": str(self.tenant_id),
            "name": self.name,
            "duration_minutes": self.duration_minutes,
            "is_active": self.is_active,
        }
