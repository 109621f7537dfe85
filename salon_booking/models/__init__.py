# salon_booking/models/__init__.py
from .base import Base
from .tenant import Tenant
from .service import Service, stylist_services
from .user import User, UserRole, UserStatus
from .appointment import Appointment

__all__ = [
    "Base",
    "Tenant",
    "Service",
    "stylist_services",
    "User",
    "UserRole",
    "UserStatus",
    "Appointment",
]
