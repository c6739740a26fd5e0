from enum import Enum
from uuid import uuid4
from pydantic import BaseModel, Field


class MetalType(str, Enum):
    aluminum = "Aluminum"
    steel = "Steel"
    both = "Both"
    unknown = "Unknown"


class Confidence(str, Enum):
    high = "High"
    medium = "Medium"
    low = "Low"


class ContextKind(str, Enum):
    text = "text"
    file = "file"


class HeadingInfo(BaseModel):
    heading: str
    description: str
    details: str | None = None


class ReferenceContext(BaseModel):
    """
    The single reference document. `content` holds raw text for `text`
    contexts and a base64 payload for `file` contexts.
    """

    kind: ContextKind
    content: str
    mimeType: str | None = None
    name: str
    extractedHeadings: list[HeadingInfo] | None = None


class ManualEntry(BaseModel):
    id: str = Field(default_factory=lambda: str(uuid4()))
    code: str
    category: str
    description: str
    metalType: MetalType = MetalType.aluminum


class DerivativeMatch(BaseModel):
    derivativeCategory: str
    metalType: MetalType
    matchDetail: str
    confidence: Confidence


class AnalysisResult(BaseModel):
    # found=False is expected to come with no matches; not enforced here.
    found: bool
    matches: list[DerivativeMatch]
    reasoning: str


class ProvisionResult(BaseModel):
    found: bool
    code: str
    metalType: str
    description: str


class HeadingsEnvelope(BaseModel):
    headings: list[HeadingInfo]


class HistoryEntry(BaseModel):
    code: str
    found: bool
