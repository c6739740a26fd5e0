from pydantic import BaseModel, Field
from model.hts import (
    AnalysisResult,
    ContextKind,
    HeadingInfo,
    HistoryEntry,
    ManualEntry,
    MetalType,
    ProvisionResult,
)
from util.enums import ProviderName, SearchMode, Theme, ViewMode


class PasteTextRequest(BaseModel):
    content: str
    name: str = "Pasted Text"


class ManualEntryRequest(BaseModel):
    # Field rules are checked by the analyzer so every bad field is reported at once.
    code: str = ""
    category: str = ""
    description: str = ""
    metalType: MetalType = MetalType.aluminum


class SearchRequest(BaseModel):
    code: str
    mode: SearchMode | None = None


class SearchModeRequest(BaseModel):
    mode: SearchMode


class ProviderRequest(BaseModel):
    # Omit to toggle between the two providers.
    provider: ProviderName | None = None


class ViewModeRequest(BaseModel):
    mode: ViewMode


class AdminLoginRequest(BaseModel):
    passcode: str = Field(min_length=1)


class ContextSummary(BaseModel):
    kind: ContextKind
    name: str
    mimeType: str | None = None
    sizeBytes: int
    preview: str | None = None
    extractedHeadings: list[HeadingInfo] | None = None


class StateResponse(BaseModel):
    searchMode: SearchMode
    viewMode: ViewMode
    isAdminAuthenticated: bool
    provider: ProviderName
    theme: Theme
    isSystemReady: bool
    isLookupReady: bool
    isLoading: bool
    isScanningDoc: bool
    context: ContextSummary | None = None
    entries: list[ManualEntry]
    result: AnalysisResult | None = None
    searchedHts: str | None = None
    provisionResult: ProvisionResult | None = None
    searchedProvision: str | None = None
    error: str | None = None
    canRetry: bool = False
    history: list[HistoryEntry]
