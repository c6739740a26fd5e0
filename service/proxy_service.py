from typing import Any, Optional, Tuple
import httpx
from fastapi import status
from config.settings import settings
from core.provider_factory import gemini_url
from util.timing import timed
from util.types import ProxyErrorPayload
import logging

logger = logging.getLogger(__name__)

ProxyReply = Tuple[int, Any]


def _error(message: str, details: Any = None) -> ProxyErrorPayload:
    payload: ProxyErrorPayload = {"error": message}
    if details is not None:
        payload["details"] = details
    return payload


class ProxyService:
    """
    Server-side pass-through to Gemini generateContent so the API key never
    leaves the server. Returns (status, JSON body) for the controller to send.
    """

    def __init__(
        self,
        api_key: str = settings.GEMINI_API_KEY,
        url: Optional[str] = None,
        timeout: float = settings.UPSTREAM_TIMEOUT_SECONDS,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._api_key = api_key
        self._url = url or gemini_url(settings.GEMINI_MODEL)
        self._timeout = timeout
        self._transport = transport

    async def forward(self, body: Any) -> ProxyReply:
        if not self._api_key:
            logger.error("proxy.misconfigured reason=missing_api_key")
            return status.HTTP_500_INTERNAL_SERVER_ERROR, _error(
                "Server misconfigured", "GEMINI_API_KEY is not set"
            )
        if not isinstance(body, dict) or "contents" not in body:
            return status.HTTP_400_BAD_REQUEST, _error(
                "Invalid request", "Request body must include 'contents'"
            )

        try:
            with timed(logger, "proxy.forward"):
                async with httpx.AsyncClient(
                    timeout=self._timeout, transport=self._transport
                ) as client:
                    r = await client.post(
                        self._url,
                        headers={
                            "x-goog-api-key": self._api_key,
                            "content-type": "application/json",
                        },
                        json=body,
                    )
        except httpx.TimeoutException:
            logger.error("proxy.timeout after=%.0fs", self._timeout)
            return status.HTTP_504_GATEWAY_TIMEOUT, _error(
                "Upstream timeout", f"No response within {self._timeout:.0f} seconds"
            )
        except httpx.RequestError as e:
            logger.error("proxy.request_error err=%s", type(e).__name__)
            return status.HTTP_502_BAD_GATEWAY, _error("Upstream request failed", str(e))

        try:
            data = r.json()
        except ValueError:
            logger.error("proxy.bad_body status=%d", r.status_code)
            return status.HTTP_502_BAD_GATEWAY, _error(
                "Invalid upstream response", (r.text or "")[:500]
            )

        if r.status_code >= 400:
            logger.warning("proxy.upstream_error status=%d", r.status_code)
            return r.status_code, _error("Upstream error", data)

        return status.HTTP_200_OK, data
