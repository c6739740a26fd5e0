import base64
import logging
from typing import Awaitable, Callable, List, Optional, Tuple, TypeVar
from config.settings import settings
from core.context_builder import build_segments, lookup_short_circuit
from core.llm_provider import LLMProvider
from core.provider_factory import get_provider
from model.api import ContextSummary, StateResponse
from model.hts import (
    AnalysisResult,
    ContextKind,
    HeadingInfo,
    HistoryEntry,
    ManualEntry,
    MetalType,
    ProvisionResult,
    ReferenceContext,
)
from repository.context_repository import ContextRepository
from repository.entry_repository import EntryRepository
from repository.preferences_repository import PreferencesRepository
from repository.store_schema import StoreSchema
from util import functions
from util.enums import ErrorMessage, ProviderName, SearchMode, Theme, ViewMode
from util.errors import AppError, BackendError, InputValidationError, StoreError

logger = logging.getLogger(__name__)

ProviderFactory = Callable[[ProviderName], LLMProvider]
T = TypeVar("T")


def _payload_size(context: ReferenceContext) -> int:
    if context.kind == ContextKind.text:
        return len(context.content.encode("utf-8"))
    data = context.content
    padding = 2 if data.endswith("==") else 1 if data.endswith("=") else 0
    return max(0, len(data) * 3 // 4 - padding)


class AnalyzerService:
    """
    Application state for one analyzer instance: the loaded reference context,
    manual entries, search/view modes, the last result and a short history.

    The store is a durable mirror only. Every store failure is logged and the
    in-memory state carries on as the source of truth.
    """

    def __init__(
        self,
        contexts: ContextRepository,
        entries: EntryRepository,
        preferences: PreferencesRepository,
        store_schema: StoreSchema,
        *,
        provider_factory: ProviderFactory = get_provider,
        default_provider: ProviderName | str = settings.DEFAULT_PROVIDER,
        admin_passcode: str = settings.ADMIN_PASSCODE,
        history_limit: int = settings.HISTORY_LIMIT,
    ) -> None:
        self._contexts = contexts
        self._entries = entries
        self._preferences = preferences
        self._store_schema = store_schema
        self._provider_factory = provider_factory
        self._admin_passcode = admin_passcode
        self._history_limit = max(1, int(history_limit))

        self.context: Optional[ReferenceContext] = None
        self.entries: List[ManualEntry] = []
        self.search_mode: SearchMode = SearchMode.COMPLIANCE
        self.view_mode: ViewMode = ViewMode.USER
        self.is_admin_authenticated: bool = False
        self.provider_name: ProviderName = ProviderName(default_provider)
        self.theme: Theme = Theme.LIGHT

        self.is_loading: bool = False
        self.is_scanning: bool = False
        self.result: Optional[AnalysisResult] = None
        self.searched_code: Optional[str] = None
        self.provision_result: Optional[ProvisionResult] = None
        self.searched_provision: Optional[str] = None
        self.error: Optional[str] = None
        self.history: List[HistoryEntry] = []
        self._last_query: Optional[Tuple[str, SearchMode]] = None

    # ---------------- Startup ----------------

    async def load(self) -> None:
        """Read the persisted context, entries and preferences once."""
        await self._persist("schema", self._store_schema.ensure_schema())
        self.context = await self._read("context.get", self._contexts.get(), None)
        self.entries = await self._read("entry.all", self._entries.all(), [])
        self.theme = await self._read("pref.theme", self._preferences.get_theme(), None) or self.theme
        self.provider_name = (
            await self._read("pref.provider", self._preferences.get_provider(), None)
            or self.provider_name
        )
        logger.info(
            "analyzer.loaded context=%s entries=%d provider=%s",
            self.context.kind.value if self.context else "none",
            len(self.entries),
            self.provider_name.value,
        )

    async def _persist(self, op: str, pending: Awaitable[object]) -> None:
        try:
            await pending
        except StoreError as e:
            logger.warning("store.%s.failed err=%s", op, e)

    async def _read(self, op: str, pending: Awaitable[T], default: T) -> T:
        try:
            return await pending
        except StoreError as e:
            logger.warning("store.%s.failed err=%s", op, e)
            return default

    # ---------------- Readiness ----------------

    @property
    def is_system_ready(self) -> bool:
        return self.context is not None or len(self.entries) > 0

    @property
    def is_lookup_ready(self) -> bool:
        return self.context is not None

    def provider(self) -> LLMProvider:
        return self._provider_factory(self.provider_name)

    # ---------------- Admin gate ----------------

    def admin_login(self, passcode: str) -> bool:
        """Plaintext compare against the shared passcode; session-local, never persisted."""
        if passcode == self._admin_passcode:
            self.is_admin_authenticated = True
            self.error = None
            logger.info("admin.login.ok")
            return True
        logger.warning("admin.login.rejected")
        return False

    def lock_admin(self) -> None:
        self.is_admin_authenticated = False
        self.view_mode = ViewMode.USER
        logger.info("admin.locked")

    def set_view_mode(self, mode: ViewMode) -> None:
        self.view_mode = mode

    # ---------------- Reference document ----------------

    async def _set_context(self, context: Optional[ReferenceContext]) -> None:
        self.context = context
        if context is not None:
            await self._persist("context.save", self._contexts.save(context))
        else:
            await self._persist("context.clear", self._contexts.clear())

    async def load_document(
        self, name: str, data: bytes, mime_type: Optional[str] = None
    ) -> ReferenceContext:
        """Keep an uploaded file as an opaque base64 payload for the backend to read."""
        if not data:
            raise AppError(
                ErrorMessage.EMPTY_DOCUMENT.value.message,
                ErrorMessage.EMPTY_DOCUMENT.value.http_status,
            )
        context = ReferenceContext(
            kind=ContextKind.file,
            content=base64.b64encode(data).decode("ascii"),
            mimeType=mime_type or "application/pdf",
            name=name or "Reference Document",
        )
        await self._set_context(context)
        logger.info("document.loaded kind=file bytes=%d mime=%s", len(data), context.mimeType)
        return context

    async def paste_text(self, content: str, name: str = "Pasted Text") -> ReferenceContext:
        if not (content or "").strip():
            raise AppError(
                ErrorMessage.EMPTY_DOCUMENT.value.message,
                ErrorMessage.EMPTY_DOCUMENT.value.http_status,
            )
        context = ReferenceContext(kind=ContextKind.text, content=content, name=name)
        await self._set_context(context)
        logger.info("document.loaded kind=text chars=%d", len(content))
        return context

    async def clear_document(self) -> None:
        await self._set_context(None)
        logger.info("document.cleared")

    async def scan_headings(self) -> List[HeadingInfo]:
        """
        Ask the backend for the document's 4-digit headings and attach them to
        the context. Failures degrade to an empty list.
        """
        if self.context is None:
            raise AppError(
                ErrorMessage.NO_REFERENCE_DOCUMENT.value.message,
                ErrorMessage.NO_REFERENCE_DOCUMENT.value.http_status,
            )
        if self.is_scanning:
            logger.info("headings.scan.busy")
            return list(self.context.extractedHeadings or [])

        self.is_scanning = True
        scanned = self.context
        try:
            segments = build_segments(scanned, [], "headings")
            headings = await self.provider().extract_headings(segments)
            if self.context is not scanned:
                # Document was replaced mid-scan; don't annotate the new one.
                logger.info("headings.scan.stale")
                return headings
            await self._set_context(scanned.model_copy(update={"extractedHeadings": headings}))
            return headings
        finally:
            self.is_scanning = False

    # ---------------- Manual entries ----------------

    def _find_entry(self, entry_id: str) -> int:
        for i, e in enumerate(self.entries):
            if e.id == entry_id:
                return i
        raise AppError(
            ErrorMessage.ENTRY_NOT_FOUND.value.message,
            ErrorMessage.ENTRY_NOT_FOUND.value.http_status,
        )

    @staticmethod
    def _validated(
        code: str, category: str, description: str, metal_type: MetalType
    ) -> Tuple[str, str, str]:
        errors = functions.validate_entry_fields(code, category, description, metal_type)
        if errors:
            raise InputValidationError(errors)
        return code.strip(), category.strip(), description.strip()

    async def add_entry(
        self,
        code: str,
        category: str,
        description: str,
        metal_type: MetalType = MetalType.aluminum,
    ) -> ManualEntry:
        code, category, description = self._validated(code, category, description, metal_type)
        entry = ManualEntry(
            code=code, category=category, description=description, metalType=metal_type
        )
        self.entries.append(entry)
        await self._persist("entry.put", self._entries.put(entry))
        logger.info("entry.added id=%s code=%s", entry.id, entry.code)
        return entry

    async def update_entry(
        self,
        entry_id: str,
        code: str,
        category: str,
        description: str,
        metal_type: MetalType = MetalType.aluminum,
    ) -> ManualEntry:
        idx = self._find_entry(entry_id)
        code, category, description = self._validated(code, category, description, metal_type)
        entry = ManualEntry(
            id=entry_id,
            code=code,
            category=category,
            description=description,
            metalType=metal_type,
        )
        self.entries[idx] = entry
        await self._persist("entry.put", self._entries.put(entry))
        logger.info("entry.updated id=%s code=%s", entry.id, entry.code)
        return entry

    async def delete_entry(self, entry_id: str) -> None:
        idx = self._find_entry(entry_id)
        del self.entries[idx]
        await self._persist("entry.delete", self._entries.delete(entry_id))
        logger.info("entry.deleted id=%s", entry_id)

    # ---------------- Search ----------------

    def set_search_mode(self, mode: SearchMode) -> None:
        self.search_mode = mode

    def _remember(self, code: str, found: bool) -> None:
        self.history = [HistoryEntry(code=code, found=found)] + self.history[
            : self._history_limit - 1
        ]

    async def search(self, code: str, mode: Optional[SearchMode] = None) -> None:
        """
        Run one compliance check or provision lookup. Blank input, an unready
        system, or a search already in flight make this a no-op.
        """
        query = (code or "").strip()
        if not query:
            return
        if not self.is_system_ready:
            logger.info("search.skip reason=not_ready")
            return
        if self.is_loading:
            logger.info("search.skip reason=busy")
            return

        if mode is not None:
            self.search_mode = mode
        active_mode = self.search_mode
        self.is_loading = True
        self.error = None
        self.result = None
        self.provision_result = None
        self._last_query = None
        # Captured by value so concurrent edits can't leak into this request
        context = self.context
        entries = list(self.entries)
        try:
            if active_mode == SearchMode.COMPLIANCE:
                segments = build_segments(context, entries, "classify", query)
                result = await self.provider().classify_code(segments)
                self.result = result
                self.searched_code = query
                self._remember(query, result.found)
            else:
                provision = lookup_short_circuit(context, query)
                if provision is None:
                    segments = build_segments(context, [], "lookup", query)
                    provision = await self.provider().lookup_provision(segments)
                self.provision_result = provision
                self.searched_provision = query
        except BackendError as e:
            logger.error(
                "search.failed mode=%s provider=%s err=%s",
                active_mode.value,
                self.provider_name.value,
                type(e).__name__,
            )
            self.error = functions.clean_error_message(e)
            self._last_query = (query, active_mode)
        finally:
            self.is_loading = False

    async def retry(self) -> None:
        """Re-run the last failed query through the full build-and-call path."""
        if self._last_query is None:
            return
        code, mode = self._last_query
        await self.search(code, mode)

    # ---------------- Preferences ----------------

    async def switch_provider(self, provider: Optional[ProviderName] = None) -> ProviderName:
        if provider is None:
            provider = (
                ProviderName.OPENAI
                if self.provider_name == ProviderName.GEMINI
                else ProviderName.GEMINI
            )
        self.provider_name = provider
        await self._persist("pref.provider", self._preferences.set_provider(provider))
        logger.info("provider.switched to=%s", provider.value)
        return provider

    async def toggle_theme(self) -> Theme:
        self.theme = Theme.DARK if self.theme == Theme.LIGHT else Theme.LIGHT
        await self._persist("pref.theme", self._preferences.set_theme(self.theme))
        return self.theme

    # ---------------- Presentation ----------------

    def snapshot(self) -> StateResponse:
        summary = None
        if self.context is not None:
            summary = ContextSummary(
                kind=self.context.kind,
                name=self.context.name,
                mimeType=self.context.mimeType,
                sizeBytes=_payload_size(self.context),
                preview=(
                    functions.clip_words(self.context.content, max_words=40)
                    if self.context.kind == ContextKind.text
                    else None
                ),
                extractedHeadings=self.context.extractedHeadings,
            )
        return StateResponse(
            searchMode=self.search_mode,
            viewMode=self.view_mode,
            isAdminAuthenticated=self.is_admin_authenticated,
            provider=self.provider_name,
            theme=self.theme,
            isSystemReady=self.is_system_ready,
            isLookupReady=self.is_lookup_ready,
            isLoading=self.is_loading,
            isScanningDoc=self.is_scanning,
            context=summary,
            entries=list(self.entries),
            result=self.result,
            searchedHts=self.searched_code,
            provisionResult=self.provision_result,
            searchedProvision=self.searched_provision,
            error=self.error,
            canRetry=self.error is not None and self._last_query is not None,
            history=list(self.history),
        )
