from redis.asyncio import Redis
from redis.exceptions import RedisError
from config.cache import get_redis
from repository.namespaces import META, SCHEMA_VERSION_FIELD, STORE_SCHEMA_VERSION
from util.errors import StoreError
import logging

logger = logging.getLogger(__name__)


class StoreSchema:
    """
    Tracks the store shape version. Hashes are created on first write, so an
    upgrade only records the new version; existing rows are left untouched.
    """

    def __init__(self, version: int = STORE_SCHEMA_VERSION) -> None:
        self._version = int(version)

    @staticmethod
    async def _client() -> Redis:
        return await get_redis()

    async def current(self) -> int:
        try:
            r = await self._client()
            raw = await r.hget(META, SCHEMA_VERSION_FIELD)
        except RedisError as e:
            raise StoreError(f"Failed to read store version: {e}") from e
        try:
            return int(raw) if raw is not None else 0
        except ValueError:
            return 0

    async def ensure_schema(self) -> int:
        """Bring the store up to this build's version; never downgrades."""
        found = await self.current()
        if found >= self._version:
            return found
        try:
            r = await self._client()
            await r.hset(META, SCHEMA_VERSION_FIELD, str(self._version))
        except RedisError as e:
            raise StoreError(f"Failed to upgrade store: {e}") from e
        logger.info("store.upgrade from=%d to=%d", found, self._version)
        return self._version
