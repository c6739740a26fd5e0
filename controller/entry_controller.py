from fastapi import APIRouter, Depends, status
from controller.controller_dependencies import (
    get_analyzer_service,
    rate_limiter,
    require_admin,
)
from model.api import ManualEntryRequest
from model.hts import ManualEntry
from service.analyzer_service import AnalyzerService
from util.constants import InternalURIs

entry_router = APIRouter(dependencies=[Depends(rate_limiter)])


@entry_router.get(InternalURIs.ENTRIES, response_model=list[ManualEntry])
async def list_entries(
    service: AnalyzerService = Depends(get_analyzer_service),
) -> list[ManualEntry]:
    return list(service.entries)


@entry_router.post(
    InternalURIs.ENTRIES,
    response_model=ManualEntry,
    status_code=status.HTTP_201_CREATED,
)
async def add_entry(
    payload: ManualEntryRequest,
    service: AnalyzerService = Depends(require_admin),
) -> ManualEntry:
    return await service.add_entry(
        payload.code, payload.category, payload.description, payload.metalType
    )


@entry_router.put(InternalURIs.ENTRY, response_model=ManualEntry)
async def update_entry(
    entry_id: str,
    payload: ManualEntryRequest,
    service: AnalyzerService = Depends(require_admin),
) -> ManualEntry:
    return await service.update_entry(
        entry_id, payload.code, payload.category, payload.description, payload.metalType
    )


@entry_router.delete(InternalURIs.ENTRY, status_code=status.HTTP_204_NO_CONTENT)
async def delete_entry(
    entry_id: str,
    service: AnalyzerService = Depends(require_admin),
) -> None:
    await service.delete_entry(entry_id)
