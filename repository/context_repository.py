from typing import Final, Optional
from pydantic import ValidationError
from redis.asyncio import Redis
from redis.exceptions import RedisError
from config.cache import get_redis
from model.hts import ReferenceContext
from repository.namespaces import ACTIVE_CONTEXT_FIELD, SETTINGS
from util.errors import StoreError
import logging

KEY: Final[str] = SETTINGS
logger = logging.getLogger(__name__)


class ContextRepository:
    """
    Flow:
    - The active reference context is one field of the settings hash.
    - Saving replaces it wholesale; clearing deletes the field.
    - No TTL: the store is the durable mirror of the in-memory context.
    """

    @staticmethod
    async def _client() -> Redis:
        return await get_redis()

    async def save(self, context: ReferenceContext) -> None:
        payload = context.model_dump_json(exclude_none=True)
        try:
            r = await self._client()
            await r.hset(KEY, ACTIVE_CONTEXT_FIELD, payload)
        except RedisError as e:
            raise StoreError(f"Failed to save reference context: {e}") from e

    async def get(self) -> Optional[ReferenceContext]:
        try:
            r = await self._client()
            raw = await r.hget(KEY, ACTIVE_CONTEXT_FIELD)
        except RedisError as e:
            raise StoreError(f"Failed to read reference context: {e}") from e
        if raw is None:
            return None
        try:
            return ReferenceContext.model_validate_json(raw)
        except ValidationError:
            # A row we can no longer decode is treated as absent
            logger.warning("store.context.undecodable")
            return None

    async def clear(self) -> None:
        try:
            r = await self._client()
            await r.hdel(KEY, ACTIVE_CONTEXT_FIELD)
        except RedisError as e:
            raise StoreError(f"Failed to clear reference context: {e}") from e
