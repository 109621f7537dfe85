# salon_booking/services/events/event_publisher.py
import json
import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional
from uuid import UUID

import redis

from salon_booking.config.redis import RedisKeys
from salon_booking.scheduling.timezones import ensure_utc

logger = logging.getLogger(__name__)


class EventPublisher:
    """Publishes domain events for the external real-time notifier"""

    VALID_EVENT_TYPES = [
        "appointment.created",
    ]

    def __init__(self, redis_client: Optional[redis.Redis], enabled: bool = True):
        self.redis = redis_client
        self.enabled = enabled and redis_client is not None

    def publish(self, event_type: str, tenant_id: UUID, event_data: Dict[str, Any]) -> bool:
        """
        Publish an event on the tenant's channel.

        Delivery is best effort: a Redis failure is logged and reported as
        False, never raised, so it cannot undo the write that produced it.
        """
        if event_type not in self.VALID_EVENT_TYPES:
            raise ValueError(f"Invalid event type: {event_type}")

        if not self.enabled:
            logger.debug(f"Event publishing disabled, dropping {event_type}")
            return False

        payload = self._build_payload(event_type, tenant_id, event_data)
        channel = RedisKeys.TENANT_EVENTS.format(tenant_id=tenant_id)

        try:
            receivers = self.redis.publish(channel, json.dumps(payload))
        except redis.RedisError as e:
            logger.error(f"Failed to publish {event_type} for tenant {tenant_id}: {e}")
            return False

        logger.info(f"Published {event_type} to {channel} ({receivers} receivers)")
        return True

    def appointment_created(self, appointment) -> bool:
        return self.publish(
            "appointment.created",
            appointment.tenant_id,
            {
                "appointment_id": str(appointment.id),
                "stylist_id": str(appointment.stylist_id),
                "service_id": str(appointment.service_id),
                "client_id": str(appointment.client_id),
                "start_time": ensure_utc(appointment.start_time).isoformat(),
                "end_time": ensure_utc(appointment.end_time).isoformat(),
            }
        )

    @staticmethod
    def _build_payload(event_type: str, tenant_id: UUID, event_data: Dict[str, Any]) -> Dict[str, Any]:
        """Build the event payload in a consistent format."""
        return {
            "event": event_type,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "tenant_id": str(tenant_id),
            "data": event_data,
        }
