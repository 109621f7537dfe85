# ============================================================================
# salon_booking/services/turn/turn_assignment_service.py
# Fair "next turn" stylist assignment
# ============================================================================
"""
Turn assignment.

Picks the stylist who has waited longest since their last service among
those who are active, qualified for the service and free for the requested
window. Stateless and lock-free: the booking transaction is what guarantees
a stylist is not handed the same window twice.
"""
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Optional
from uuid import UUID
from sqlalchemy.orm import Session
import logging

from salon_booking.models.service import Service, stylist_services
from salon_booking.models.tenant import Tenant
from salon_booking.models.user import User, UserRole, UserStatus
from salon_booking.scheduling.availability import REASON_CONFLICT
from salon_booking.scheduling.exceptions import NoStylistAvailable, StylistNotFound
from salon_booking.scheduling.timezones import to_instant
from salon_booking.scheduling.turns import matches_requested, rank_by_turn
from salon_booking.services.availability.availability_service import AvailabilityService

logger = logging.getLogger(__name__)


@dataclass
class QueueEntry:
    stylist: User
    is_busy: bool

    def to_dict(self) -> Dict[str, Any]:
        data = self.stylist.to_dict()
        data["is_busy"] = self.is_busy
        data["status_label"] = "busy" if self.is_busy else "available"
        return data


class TurnAssignmentService:
    """Least-recently-served stylist selection"""

    @staticmethod
    def qualified_stylists(db: Session, tenant_id: UUID, service_id: UUID) -> List[User]:
        """Active stylists of the tenant explicitly associated with the service."""
        return db.query(User).join(
            stylist_services, stylist_services.c.user_id == User.id
        ).filter(
            User.tenant_id == tenant_id,
            User.role == UserRole.STYLIST,
            User.status == UserStatus.ACTIVE,
            stylist_services.c.service_id == service_id
        ).all()

    @staticmethod
    def _filter_requested(candidates: List[User], requested_stylist: Optional[str]) -> List[User]:
        if not requested_stylist or not requested_stylist.strip():
            return candidates
        matches = [s for s in candidates if matches_requested(s, requested_stylist)]
        if not matches:
            raise StylistNotFound(f"No stylist matching '{requested_stylist}' offers this service")
        return matches

    @staticmethod
    def _evaluate(
            db: Session,
            tenant: Tenant,
            service: Service,
            candidates: List[User],
            start: datetime
    ) -> List[QueueEntry]:
        """Turn-ordered entries for candidates working at `start`, flagged busy/free."""
        entries = []
        for stylist in rank_by_turn(candidates):
            check = AvailabilityService.check_slot(db, tenant, stylist, service, start)
            if check.available:
                logger.debug(f"Stylist {stylist.full_name}: available")
                entries.append(QueueEntry(stylist=stylist, is_busy=False))
            elif check.reason == REASON_CONFLICT:
                logger.debug(f"Stylist {stylist.full_name}: busy")
                entries.append(QueueEntry(stylist=stylist, is_busy=True))
            else:
                logger.debug(f"Stylist {stylist.full_name}: outside working hours")
        return entries

    @staticmethod
    def suggest_stylist(
            db: Session,
            tenant_id: UUID,
            service_id: UUID,
            start: datetime,
            requested_stylist: Optional[str] = None
    ) -> User:
        """
        Select exactly one eligible stylist for [start, start + duration).

        Raises StylistNotFound when a requested name matches no qualified
        stylist, NoStylistAvailable when nobody eligible is free.
        """
        tenant = AvailabilityService.get_tenant(db, tenant_id)
        service = AvailabilityService.get_service(db, tenant_id, service_id)
        start = to_instant(start, tenant.timezone)

        candidates = TurnAssignmentService.qualified_stylists(db, tenant_id, service_id)
        candidates = TurnAssignmentService._filter_requested(candidates, requested_stylist)

        for entry in TurnAssignmentService._evaluate(db, tenant, service, candidates, start):
            if not entry.is_busy:
                logger.info(
                    f"Turn assigned to {entry.stylist.full_name} ({entry.stylist.id}) "
                    f"for service {service.name} at {start.isoformat()}"
                )
                return entry.stylist

        logger.info(f"No stylist available for service {service.name} at {start.isoformat()}")
        raise NoStylistAvailable(f"No stylist is available for {service.name} at {start.isoformat()}")

    @staticmethod
    def get_turn_queue(
            db: Session,
            tenant_id: UUID,
            service_id: UUID,
            start: datetime
    ) -> List[QueueEntry]:
        """
        Every qualified stylist who works at `start`, in turn order, with
        available stylists first and busy ones after.
        """
        tenant = AvailabilityService.get_tenant(db, tenant_id)
        service = AvailabilityService.get_service(db, tenant_id, service_id)
        start = to_instant(start, tenant.timezone)

        candidates = TurnAssignmentService.qualified_stylists(db, tenant_id, service_id)
        entries = TurnAssignmentService._evaluate(db, tenant, service, candidates, start)
        return [e for e in entries if not e.is_busy] + [e for e in entries if e.is_busy]
