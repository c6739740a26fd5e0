from typing import Any, Dict, List, Sequence
from core.entities import InlineSegment, Segment, TextSegment
from core.llm_provider import LLMProvider
from core.schemas import ResponseSchema
from util.errors import BackendProtocolError
from util.types import GeminiPart
import logging

logger = logging.getLogger(__name__)


def to_gemini_schema(node: Any) -> Any:
    """
    Gemini's responseSchema spells types as OpenAPI enum names (OBJECT,
    STRING, ...). Everything else carries over as-is.
    """
    if isinstance(node, dict):
        out: Dict[str, Any] = {}
        for key, value in node.items():
            if key == "type" and isinstance(value, str):
                out[key] = value.upper()
            else:
                out[key] = to_gemini_schema(value)
        return out
    if isinstance(node, list):
        return [to_gemini_schema(v) for v in node]
    return node


def to_parts(segments: Sequence[Segment]) -> List[GeminiPart]:
    parts: List[GeminiPart] = []
    for seg in segments:
        if isinstance(seg, InlineSegment):
            parts.append({"inlineData": {"mimeType": seg.mime_type, "data": seg.data}})
        elif isinstance(seg, TextSegment):
            parts.append({"text": seg.text})
        else:
            raise TypeError(f"unsupported segment: {type(seg).__name__}")
    return parts


def _response_text(data: Dict[str, Any]) -> str:
    candidates = data.get("candidates")
    if not isinstance(candidates, list) or not candidates or not isinstance(candidates[0], dict):
        feedback = data.get("promptFeedback") or {}
        reason = feedback.get("blockReason") if isinstance(feedback, dict) else None
        raise BackendProtocolError(
            f"No response from Gemini{f' (blocked: {reason})' if reason else ''}."
        )
    content = candidates[0].get("content")
    if not isinstance(content, dict):
        raise BackendProtocolError("Gemini response candidate has no content.")
    parts = content.get("parts")
    if not isinstance(parts, list):
        raise BackendProtocolError("Gemini response content has no parts.")
    return "".join(
        str(p.get("text") or "") for p in parts if isinstance(p, dict) and not p.get("thought")
    )


class GeminiProvider(LLMProvider):
    name = "gemini"

    def build_payload(
        self, segments: Sequence[Segment], schema: ResponseSchema
    ) -> Dict[str, Any]:
        return {
            "contents": [{"role": "user", "parts": to_parts(segments)}],
            "generationConfig": {
                "responseMimeType": "application/json",
                "responseSchema": to_gemini_schema(schema.json_schema),
                "temperature": 0,
            },
        }

    async def _generate(self, segments: Sequence[Segment], schema: ResponseSchema) -> str:
        self._require_key()
        headers = {
            "x-goog-api-key": self._api_key,
            "content-type": "application/json",
        }
        data = await self._post_json(self._url, headers, self.build_payload(segments, schema))
        text = _response_text(data)
        if not text.strip():
            raise BackendProtocolError("No response from Gemini.")
        return text
