# storefront/services/session_store.py
import uuid

import redis

from storefront.domain.session import SessionContext
from storefront.utils.retry import redis_retry
from storefront.utils.settings import REDIS_URL, SESSION_TTL_SECONDS
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


class SessionStore:
    """
    -przechowywanie SessionContext w redisie jako JSON
    -klucz session:{id}, TTL odnawiany przy kazdym zapisie
    """

    def __init__(self, client: redis.Redis | None = None, ttl: int = SESSION_TTL_SECONDS):
        self.redis = client or redis.Redis.from_url(REDIS_URL, decode_responses=True)
        self.ttl = ttl

    @staticmethod
    def _key(session_id: str) -> str:
        return f"session:{session_id}"

    @staticmethod
    def new_session_id() -> str:
        return uuid.uuid4().hex

    @redis_retry()
    def load(self, session_id: str) -> SessionContext:
        raw = self.redis.get(self._key(session_id))
        if not raw:
            return SessionContext(session_id=session_id)
        return SessionContext.model_validate_json(raw)

    @redis_retry()
    def save(self, ctx: SessionContext):
        self.redis.set(self._key(ctx.session_id), ctx.model_dump_json(), ex=self.ttl)

    @redis_retry()
    def destroy(self, session_id: str):
        logger.info(f"Destroying session {session_id}")
        self.redis.delete(self._key(session_id))
