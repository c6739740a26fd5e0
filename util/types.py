from typing import Any, Dict, List, Literal, TypedDict


# Flow: Narrow types for the provider wire formats.
TaskKind = Literal["classify", "lookup", "headings"]


class GeminiInlineData(TypedDict):
    mimeType: str
    data: str


class GeminiPart(TypedDict, total=False):
    text: str
    inlineData: GeminiInlineData


class OpenAIMessage(TypedDict):
    role: Literal["user", "system"]
    content: str | List[Dict[str, Any]]


class ProxyErrorPayload(TypedDict, total=False):
    error: str
    details: Any
