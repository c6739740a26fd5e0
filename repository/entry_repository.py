from typing import Final, List
from pydantic import ValidationError
from redis.asyncio import Redis
from redis.exceptions import RedisError
from config.cache import get_redis
from model.hts import ManualEntry
from repository.namespaces import ENTRIES
from util.errors import StoreError
import logging

KEY: Final[str] = ENTRIES
logger = logging.getLogger(__name__)


class EntryRepository:
    """
    Manual entries live in one hash keyed by entry id; each mutation is
    persisted on its own.
    """

    @staticmethod
    async def _client() -> Redis:
        return await get_redis()

    async def put(self, entry: ManualEntry) -> None:
        try:
            r = await self._client()
            await r.hset(KEY, entry.id, entry.model_dump_json())
        except RedisError as e:
            raise StoreError(f"Failed to save entry {entry.id}: {e}") from e

    async def all(self) -> List[ManualEntry]:
        try:
            r = await self._client()
            rows = await r.hgetall(KEY)
        except RedisError as e:
            raise StoreError(f"Failed to read entries: {e}") from e
        out: List[ManualEntry] = []
        for entry_id, raw in (rows or {}).items():
            try:
                out.append(ManualEntry.model_validate_json(raw))
            except ValidationError:
                # Skip malformed rows instead of failing the whole load
                logger.warning("store.entry.undecodable id=%s", entry_id)
                continue
        return out

    async def delete(self, entry_id: str) -> int:
        try:
            r = await self._client()
            return int(await r.hdel(KEY, entry_id))
        except RedisError as e:
            raise StoreError(f"Failed to delete entry {entry_id}: {e}") from e
