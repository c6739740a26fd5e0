from dataclasses import dataclass
from typing import Optional, Union


@dataclass(frozen=True)
class TextSegment:
    text: str


@dataclass(frozen=True)
class InlineSegment:
    """
    Binary document passed through to the backend untouched.
    """

    mime_type: str
    data: str  # base64 payload
    name: Optional[str] = None


Segment = Union[TextSegment, InlineSegment]
