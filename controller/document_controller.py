from fastapi import APIRouter, Depends, File, Form, UploadFile, status
from controller.controller_dependencies import (
    enforce_max_upload_size,
    rate_limiter,
    require_admin,
)
from model.api import PasteTextRequest, StateResponse
from model.hts import HeadingInfo
from service.analyzer_service import AnalyzerService
from util.constants import InternalURIs

document_router = APIRouter(dependencies=[Depends(rate_limiter)])


@document_router.post(
    InternalURIs.DOCUMENT_UPLOAD,
    response_model=StateResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(enforce_max_upload_size)],
)
async def upload_document(
    file: UploadFile = File(...),
    name: str | None = Form(None),
    service: AnalyzerService = Depends(require_admin),
) -> StateResponse:
    data = await file.read()
    await service.load_document(
        name=name or file.filename or "Reference Document",
        data=data,
        mime_type=file.content_type,
    )
    return service.snapshot()


@document_router.post(
    InternalURIs.DOCUMENT_TEXT,
    response_model=StateResponse,
    status_code=status.HTTP_201_CREATED,
)
async def paste_text(
    payload: PasteTextRequest,
    service: AnalyzerService = Depends(require_admin),
) -> StateResponse:
    await service.paste_text(payload.content, name=payload.name)
    return service.snapshot()


@document_router.delete(InternalURIs.DOCUMENT, response_model=StateResponse)
async def clear_document(
    service: AnalyzerService = Depends(require_admin),
) -> StateResponse:
    await service.clear_document()
    return service.snapshot()


@document_router.post(InternalURIs.DOCUMENT_HEADINGS, response_model=list[HeadingInfo])
async def scan_headings(
    service: AnalyzerService = Depends(require_admin),
) -> list[HeadingInfo]:
    return await service.scan_headings()
