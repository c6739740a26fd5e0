from typing import Callable, Dict, Optional
import httpx
from config.settings import settings
from core.gemini_provider import GeminiProvider
from core.llm_provider import LLMProvider
from core.openai_provider import OpenAIProvider
from util.enums import ProviderName


def gemini_url(model: str) -> str:
    return settings.GEMINI_API_URL.format(model=model)


def _gemini(transport: Optional[httpx.AsyncBaseTransport]) -> LLMProvider:
    return GeminiProvider(
        api_key=settings.GEMINI_API_KEY,
        api_url=gemini_url(settings.GEMINI_MODEL),
        model=settings.GEMINI_MODEL,
        timeout=settings.LLM_TIMEOUT_SECONDS,
        transport=transport,
    )


def _openai(transport: Optional[httpx.AsyncBaseTransport]) -> LLMProvider:
    return OpenAIProvider(
        api_key=settings.OPENAI_API_KEY,
        api_url=settings.OPENAI_API_URL,
        model=settings.OPENAI_MODEL,
        timeout=settings.LLM_TIMEOUT_SECONDS,
        transport=transport,
    )


PROVIDERS: Dict[ProviderName, Callable[[Optional[httpx.AsyncBaseTransport]], LLMProvider]] = {
    ProviderName.GEMINI: _gemini,
    ProviderName.OPENAI: _openai,
}


def get_provider(
    name: ProviderName | str, transport: Optional[httpx.AsyncBaseTransport] = None
) -> LLMProvider:
    """Resolve a configured provider by name. Raises ValueError for unknown names."""
    key = ProviderName(name)
    return PROVIDERS[key](transport)
