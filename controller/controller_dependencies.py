from fastapi import Depends, File, HTTPException, Request, UploadFile
from fastapi_limiter.depends import RateLimiter
from config.settings import settings
from repository.context_repository import ContextRepository
from repository.entry_repository import EntryRepository
from repository.preferences_repository import PreferencesRepository
from repository.store_schema import StoreSchema
from service.analyzer_service import AnalyzerService
from service.proxy_service import ProxyService
from util.enums import ErrorMessage
from util.errors import AppError

# Shared so tests can override a single dependency.
rate_limiter = RateLimiter(
    times=settings.RATE_LIMIT_TIMES, seconds=settings.RATE_LIMIT_SECONDS
)


def build_analyzer_service() -> AnalyzerService:
    _contexts = ContextRepository()
    _entries = EntryRepository()
    _preferences = PreferencesRepository()
    _schema = StoreSchema()
    return AnalyzerService(_contexts, _entries, _preferences, _schema)


def get_analyzer_service(request: Request) -> AnalyzerService:
    # One analyzer per process, created and loaded in the app lifespan.
    return request.app.state.analyzer


def require_admin(
    service: AnalyzerService = Depends(get_analyzer_service),
) -> AnalyzerService:
    if not service.is_admin_authenticated:
        raise AppError(
            ErrorMessage.ADMIN_REQUIRED.value.message,
            ErrorMessage.ADMIN_REQUIRED.value.http_status,
        )
    return service


def get_proxy_service() -> ProxyService:
    return ProxyService()


async def enforce_max_upload_size(
    request: Request, file: UploadFile = File(...)
) -> UploadFile:
    # Fast pre-check via Content-Length if present
    max_bytes = settings.MAX_FILE_MB * 1024 * 1024
    cl = request.headers.get("content-length")
    if cl and cl.isdigit() and int(cl) > max_bytes:
        raise HTTPException(
            status_code=413,
            detail={
                "ok": False,
                "error": "file_too_large",
                "maxMb": settings.MAX_FILE_MB,
            },
        )

    # Hard cap while reading initial bytes (works even if no Content-Length)
    blob = await file.read(max_bytes + 1)
    if len(blob) > max_bytes:
        raise HTTPException(
            status_code=413,
            detail={
                "ok": False,
                "error": "file_too_large",
                "maxMb": settings.MAX_FILE_MB,
            },
        )

    # Reset so downstream can re-read file stream
    await file.seek(0)
    return file
