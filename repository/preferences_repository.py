from typing import Final, Optional
from redis.asyncio import Redis
from redis.exceptions import RedisError
from config.cache import get_redis
from repository.namespaces import PROVIDER_FIELD, SETTINGS, THEME_FIELD
from util.enums import ProviderName, Theme
from util.errors import StoreError
import logging

KEY: Final[str] = SETTINGS
logger = logging.getLogger(__name__)


class PreferencesRepository:
    """
    Theme and provider choice, stored next to the active context so they are
    read once at startup and threaded through the analyzer explicitly.
    """

    @staticmethod
    async def _client() -> Redis:
        return await get_redis()

    async def _get(self, field: str) -> Optional[str]:
        try:
            r = await self._client()
            return await r.hget(KEY, field)
        except RedisError as e:
            raise StoreError(f"Failed to read preference {field}: {e}") from e

    async def _set(self, field: str, value: str) -> None:
        try:
            r = await self._client()
            await r.hset(KEY, field, value)
        except RedisError as e:
            raise StoreError(f"Failed to save preference {field}: {e}") from e

    async def get_theme(self) -> Optional[Theme]:
        raw = await self._get(THEME_FIELD)
        try:
            return Theme(raw) if raw else None
        except ValueError:
            logger.warning("store.pref.invalid field=%s", THEME_FIELD)
            return None

    async def set_theme(self, theme: Theme) -> None:
        await self._set(THEME_FIELD, theme.value)

    async def get_provider(self) -> Optional[ProviderName]:
        raw = await self._get(PROVIDER_FIELD)
        try:
            return ProviderName(raw) if raw else None
        except ValueError:
            logger.warning("store.pref.invalid field=%s", PROVIDER_FIELD)
            return None

    async def set_provider(self, provider: ProviderName) -> None:
        await self._set(PROVIDER_FIELD, provider.value)
