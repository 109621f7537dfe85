# ============================================================================
# salon_booking/services/conversation/session_store.py
# ============================================================================
"""
Keyed session flags for the conversational layer

Per-chat state such as "awaiting first name" lives here with a TTL so stale
chats expire on their own. The scheduling core never reads these flags: a
flag saying a slot was "confirmed" is not proof the slot is still free.
"""
import logging
from typing import Dict, Optional
from uuid import UUID

import redis

from salon_booking.config.redis import RedisKeys

logger = logging.getLogger(__name__)


class ConversationSessionStore:
    """Redis hash per (tenant, chat), expiring SESSION_TTL_SECONDS after the last write"""

    def __init__(self, redis_client: redis.Redis, ttl_seconds: int):
        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be positive")
        self.redis = redis_client
        self.ttl_seconds = ttl_seconds

    @staticmethod
    def _key(tenant_id: UUID, chat_id: str) -> str:
        return RedisKeys.CHAT_FLAGS.format(tenant_id=tenant_id, chat_id=chat_id)

    def set_flag(self, tenant_id: UUID, chat_id: str, name: str, value: str) -> None:
        key = self._key(tenant_id, chat_id)
        pipe = self.redis.pipeline()
        pipe.hset(key, name, value)
        pipe.expire(key, self.ttl_seconds)
        pipe.execute()

    def get_flag(self, tenant_id: UUID, chat_id: str, name: str) -> Optional[str]:
        value = self.redis.hget(self._key(tenant_id, chat_id), name)
        if isinstance(value, bytes):
            value = value.decode()
        return value

    def get_flags(self, tenant_id: UUID, chat_id: str) -> Dict[str, str]:
        raw = self.redis.hgetall(self._key(tenant_id, chat_id))
        return {
            (k.decode() if isinstance(k, bytes) else k): (v.decode() if isinstance(v, bytes) else v)
            for k, v in raw.items()
        }

    def clear_flag(self, tenant_id: UUID, chat_id: str, name: str) -> None:
        self.redis.hdel(self._key(tenant_id, chat_id), name)

    def clear(self, tenant_id: UUID, chat_id: str) -> None:
        self.redis.delete(self._key(tenant_id, chat_id))
        logger.debug(f"Cleared session flags for chat {chat_id}")
