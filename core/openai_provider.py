from typing import Any, Dict, List, Sequence
from core.entities import InlineSegment, Segment, TextSegment
from core.llm_provider import LLMProvider
from core.schemas import ResponseSchema
from util.errors import BackendProtocolError
from util.types import OpenAIMessage
import logging

logger = logging.getLogger(__name__)


def to_messages(segments: Sequence[Segment]) -> List[OpenAIMessage]:
    """
    One user message per segment, in order. Inline documents travel as a
    `file` content part with a base64 data URL.
    """
    messages: List[OpenAIMessage] = []
    for seg in segments:
        if isinstance(seg, InlineSegment):
            messages.append(
                {
                    "role": "user",
                    "content": [
                        {
                            "type": "file",
                            "file": {
                                "filename": seg.name or "reference-document",
                                "file_data": f"data:{seg.mime_type};base64,{seg.data}",
                            },
                        }
                    ],
                }
            )
        elif isinstance(seg, TextSegment):
            messages.append({"role": "user", "content": seg.text})
        else:
            raise TypeError(f"unsupported segment: {type(seg).__name__}")
    return messages


def _response_text(data: Dict[str, Any]) -> str:
    choices = data.get("choices")
    if not isinstance(choices, list) or not choices or not isinstance(choices[0], dict):
        raise BackendProtocolError("No response from OpenAI.")
    message = choices[0].get("message")
    if not isinstance(message, dict):
        raise BackendProtocolError("OpenAI response choice has no message.")
    if message.get("refusal"):
        raise BackendProtocolError(f"OpenAI refused the request: {message['refusal']}")
    return str(message.get("content") or "")


class OpenAIProvider(LLMProvider):
    name = "openai"

    def build_payload(
        self, segments: Sequence[Segment], schema: ResponseSchema
    ) -> Dict[str, Any]:
        return {
            "model": self._model,
            "messages": to_messages(segments),
            "response_format": {
                "type": "json_schema",
                "json_schema": {"name": schema.name, "schema": schema.json_schema},
            },
            "temperature": 0,
        }

    async def _generate(self, segments: Sequence[Segment], schema: ResponseSchema) -> str:
        self._require_key()
        headers = {
            "authorization": f"Bearer {self._api_key}",
            "content-type": "application/json",
        }
        data = await self._post_json(self._url, headers, self.build_payload(segments, schema))
        text = _response_text(data)
        if not text.strip():
            raise BackendProtocolError("No response from OpenAI.")
        return text
