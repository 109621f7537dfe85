# ============================================================================
# FILE: salon_booking/models/user.py
# Stylists and clients share the users table, distinguished by role
# ============================================================================
from sqlalchemy import Column, String, DateTime, JSON, ForeignKey, Uuid, Enum as SQLEnum
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import uuid
import enum

from salon_booking.models.base import Base
from salon_booking.models.service import stylist_services


class UserRole(str, enum.Enum):
    """Roles within a tenant."""
    ADMIN = "admin"
    STYLIST = "stylist"
    CLIENT = "client"


class UserStatus(str, enum.Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"


class User(Base):
    __tablename__ = "users"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    tenant_id = Column(Uuid(as_uuid=True), ForeignKey("tenants.id", ondelete="CASCADE"), nullable=False, index=True)

    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=True)
    email = Column(String(255), nullable=True)
    phone = Column(String(30), nullable=True)

    role = Column(
        SQLEnum(UserRole, name="user_role", native_enum=False, values_callable=lambda e: [m.value for m in e]),
        default=UserRole.CLIENT,
        nullable=False,
        index=True
    )
    status = Column(
        SQLEnum(UserStatus, name="user_status", native_enum=False, values_callable=lambda e: [m.value for m in e]),
        default=UserStatus.ACTIVE,
        nullable=False
    )

    # Stylist-only: NULL inherits the tenant schedule entirely
    working_hours = Column(JSON, nullable=True)

    # Stylist-only turn marker, stamped at checkout
    last_service_at = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    # Relationships
    services = relationship(
        "Service",
        secondary=stylist_services,
        backref="stylists",
        lazy="selectin"
    )

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name or ''}".strip()

    def to_dict(self):
        return {
            "id": str(self.id),
            "tenant_id": str(self.tenant_id),
            "name": self.full_name,
            "role": self.role.value if self.role else None,
            "status": self.status.value if self.status else None,
            "last_service_at": self.last_service_at.isoformat() if self.last_service_at else None,
        }

    def __repr__(self):
        return f"<User {self.full_name} ({self.role})>"
