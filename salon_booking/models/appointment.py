# ===== salon_booking/models/appointment.py =====
from sqlalchemy import Column, Text, DateTime, ForeignKey, Index, Uuid, Enum as SQLEnum
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import uuid

from salon_booking.models.base import Base
from salon_booking.scheduling.status import AppointmentStatus
from salon_booking.scheduling.timezones import ensure_utc


class Appointment(Base):
    __tablename__ = "appointments"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)

    # References
    tenant_id = Column(Uuid(as_uuid=True), ForeignKey("tenants.id"), nullable=False)
    client_id = Column(Uuid(as_uuid=True), ForeignKey("users.id"), nullable=False)
    stylist_id = Column(Uuid(as_uuid=True), ForeignKey("users.id"), nullable=False)
    service_id = Column(Uuid(as_uuid=True), ForeignKey("services.id"), nullable=False)

    # Half-open [start_time, end_time), stored in UTC
    start_time = Column(DateTime(timezone=True), nullable=False)
    end_time = Column(DateTime(timezone=True), nullable=False)

    status = Column(
        SQLEnum(
            AppointmentStatus,
            name="appointment_status",
            native_enum=False,
            values_callable=lambda e: [m.value for m in e],
        ),
        nullable=False,
        default=AppointmentStatus.SCHEDULED,
    )

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
    cancelled_at = Column(DateTime(timezone=True), nullable=True)
    cancellation_reason = Column(Text, nullable=True)

    stylist = relationship("User", foreign_keys=[stylist_id])
    service = relationship("Service")

    __table_args__ = (
        Index("ix_appointments_stylist_start", "stylist_id", "start_time"),
        Index("ix_appointments_tenant_start", "tenant_id", "start_time"),
    )

    def to_dict(self):
        return {
            "id": str(self.id),
            "tenant_id": str(self.tenant_id),
            "client_id": str(self.client_id),
            "stylist_id": str(self.stylist_id),
            "service_id": str(self.service_id),
            "start_time": ensure_utc(self.start_time).isoformat(),
            "end_time": ensure_utc(self.end_time).isoformat(),
            "status": self.status.value,
            "cancellation_reason": self.cancellation_reason,
        }

    def __repr__(self):
        return f"<Appointment(id={self.id}, stylist_id={self.stylist_id}, status={self.status})>"
