"""
Shared pytest fixtures for the analyzer tests.

Provides an in-memory Redis double, a scripted LLM provider and a factory
for analyzer instances wired to both.
"""

import json
import os
from typing import Any, Dict, List, Optional, Tuple

# Settings are read at import time; give them a complete test environment first.
os.environ.setdefault("APP_ENV", "test")
os.environ.setdefault("REDIS_URL", "redis://localhost:6379/15")
os.environ.setdefault("ALLOWED_ORIGIN", "http://localhost:5173")
os.environ.setdefault("RATE_LIMIT_TIMES", "100")
os.environ.setdefault("RATE_LIMIT_SECONDS", "60")
os.environ.setdefault("MAX_FILE_MB", "1")
os.environ.setdefault("TRUST_PROXY", "false")
os.environ.setdefault("GEMINI_API_KEY", "test-gemini-key")
os.environ.setdefault("OPENAI_API_KEY", "test-openai-key")

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from config import cache
from core.entities import Segment
from core.llm_provider import LLMProvider
from core.schemas import ResponseSchema
from repository.context_repository import ContextRepository
from repository.entry_repository import EntryRepository
from repository.preferences_repository import PreferencesRepository
from repository.store_schema import StoreSchema
from service.analyzer_service import AnalyzerService


# ============================================================================
# In-memory Redis double (hash commands only)
# ============================================================================


class FakeRedis:
    def __init__(self) -> None:
        self.hashes: Dict[str, Dict[str, str]] = {}
        self.offline = False

    def _check(self) -> None:
        if self.offline:
            raise RedisConnectionError("store offline")

    async def ping(self) -> bool:
        self._check()
        return True

    async def hset(self, name, key=None, value=None, mapping=None) -> int:
        self._check()
        table = self.hashes.setdefault(name, {})
        items = dict(mapping or {})
        if key is not None:
            items[key] = value
        added = sum(1 for k in items if k not in table)
        table.update({k: str(v) for k, v in items.items()})
        return added

    async def hget(self, name, key) -> Optional[str]:
        self._check()
        return self.hashes.get(name, {}).get(key)

    async def hgetall(self, name) -> Dict[str, str]:
        self._check()
        return dict(self.hashes.get(name, {}))

    async def hdel(self, name, *keys) -> int:
        self._check()
        table = self.hashes.get(name, {})
        removed = 0
        for k in keys:
            if k in table:
                del table[k]
                removed += 1
        return removed

    async def aclose(self) -> None:
        return None


@pytest.fixture
def fake_redis(monkeypatch) -> FakeRedis:
    fake = FakeRedis()
    monkeypatch.setattr(cache, "_client", fake)
    return fake


# ============================================================================
# Scripted provider: canned raw bodies, records every request
# ============================================================================


class ScriptedProvider(LLMProvider):
    name = "scripted"

    def __init__(self, *replies: Any) -> None:
        super().__init__(api_key="test", api_url="http://llm.test", model="test-model")
        self.replies: List[Any] = list(replies)
        self.requests: List[Tuple[List[Segment], str]] = []

    async def _generate(self, segments, schema: ResponseSchema) -> str:
        self.requests.append((list(segments), schema.name))
        if not self.replies:
            raise AssertionError("no scripted reply left")
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return reply if isinstance(reply, str) else json.dumps(reply)


@pytest.fixture
def make_analyzer(fake_redis):
    def _make(provider: LLMProvider, **kwargs) -> AnalyzerService:
        return AnalyzerService(
            ContextRepository(),
            EntryRepository(),
            PreferencesRepository(),
            StoreSchema(),
            provider_factory=lambda _name: provider,
            **kwargs,
        )

    return _make


ANALYSIS_HIT = {
    "found": True,
    "matches": [
        {
            "derivativeCategory": "Aluminum Plates",
            "metalType": "Aluminum",
            "matchDetail": "Manual rule 7604.10 covers this code.",
            "confidence": "High",
        }
    ],
    "reasoning": "Matches a manual override rule.",
}

ANALYSIS_MISS = {"found": False, "matches": [], "reasoning": "No rule covers this code."}
