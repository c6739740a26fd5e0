from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Sequence
import httpx
from core.entities import Segment
from core.schemas import (
    ANALYSIS_SCHEMA,
    HEADINGS_SCHEMA,
    PROVISION_SCHEMA,
    ResponseSchema,
    decode_as,
)
from model.hts import AnalysisResult, HeadingInfo, HeadingsEnvelope, ProvisionResult
from util.errors import BackendProtocolError, BackendTransportError
from util.timing import timed
import logging

logger = logging.getLogger(__name__)


def _upstream_message(resp: httpx.Response) -> str:
    """
    Pull a readable message out of an error body. Both providers nest it as
    {"error": {"message": ...}}; fall back to the raw text.
    """
    try:
        body = resp.json()
    except ValueError:
        return (resp.text or "").strip()[:300] or resp.reason_phrase
    if isinstance(body, dict):
        err = body.get("error")
        if isinstance(err, dict) and err.get("message"):
            return str(err["message"])
        if isinstance(err, str) and err:
            return err
    return resp.reason_phrase


class LLMProvider(ABC):
    """
    One interchangeable LLM backend. Subclasses only render the request and
    pull the raw answer text out of the response; decoding, error mapping and
    logging are shared.
    """

    name: str = "provider"

    def __init__(
        self,
        *,
        api_key: str,
        api_url: str,
        model: str,
        timeout: float = 60.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._api_key = api_key
        self._url = api_url
        self._model = model
        self._timeout = timeout
        self._transport = transport

    # ---------------- Capability interface ----------------

    async def classify_code(
        self, segments: Sequence[Segment], schema: ResponseSchema = ANALYSIS_SCHEMA
    ) -> AnalysisResult:
        with timed(logger, "ai.classify", provider=self.name, segments=len(segments)):
            raw = await self._generate(segments, schema)
        result = decode_as(schema, raw, AnalysisResult)
        logger.info(
            "ai.classify.result provider=%s found=%s matches=%d",
            self.name,
            result.found,
            len(result.matches),
        )
        return result

    async def lookup_provision(
        self, segments: Sequence[Segment], schema: ResponseSchema = PROVISION_SCHEMA
    ) -> ProvisionResult:
        with timed(logger, "ai.lookup", provider=self.name, segments=len(segments)):
            raw = await self._generate(segments, schema)
        result = decode_as(schema, raw, ProvisionResult)
        logger.info("ai.lookup.result provider=%s found=%s", self.name, result.found)
        return result

    async def extract_headings(
        self, segments: Sequence[Segment], schema: ResponseSchema = HEADINGS_SCHEMA
    ) -> List[HeadingInfo]:
        """
        Best effort: any failure yields an empty list.
        """
        try:
            with timed(logger, "ai.headings", provider=self.name):
                raw = await self._generate(segments, schema)
            envelope = decode_as(schema, raw, HeadingsEnvelope)
        except Exception as e:
            logger.warning(
                "ai.headings.degraded provider=%s err=%s", self.name, type(e).__name__
            )
            return []
        logger.info("ai.headings.result provider=%s count=%d", self.name, len(envelope.headings))
        return list(envelope.headings)

    # ---------------- Provider hook ----------------

    @abstractmethod
    async def _generate(self, segments: Sequence[Segment], schema: ResponseSchema) -> str:
        """Send one schema-constrained, temperature-0 request; return the raw answer text."""

    # ---------------- Transport ----------------

    def _require_key(self) -> None:
        if not self._api_key:
            raise BackendTransportError(f"API key is not configured for provider {self.name}.")

    async def _post_json(
        self, url: str, headers: Dict[str, str], payload: Dict[str, Any]
    ) -> Dict[str, Any]:
        """
        JSON POST to `url`. Maps timeouts, connection failures and non-2xx
        statuses to BackendTransportError; a non-JSON body to BackendProtocolError.
        """
        try:
            async with httpx.AsyncClient(
                timeout=self._timeout, transport=self._transport
            ) as client:
                r = await client.post(url, headers=headers, json=payload)
        except httpx.TimeoutException as e:
            logger.error("ai.request.timeout provider=%s", self.name)
            raise BackendTransportError(
                f"{self.name} request timed out after {self._timeout:.0f}s.", timeout=True
            ) from e
        except httpx.RequestError as e:
            logger.error("ai.request.error provider=%s err=%s", self.name, type(e).__name__)
            raise BackendTransportError(f"{self.name} request failed: {e}") from e

        if r.status_code // 100 != 2:
            message = _upstream_message(r)
            logger.error("ai.request.status provider=%s status=%d", self.name, r.status_code)
            raise BackendTransportError(
                f"{self.name} returned status {r.status_code}: {message}",
                status_code=r.status_code,
            )

        try:
            data = r.json()
        except ValueError as e:
            raise BackendProtocolError(f"{self.name} returned a non-JSON body.") from e
        if not isinstance(data, dict):
            raise BackendProtocolError(f"{self.name} returned an unexpected body.")
        return data
