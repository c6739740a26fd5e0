from fastapi import APIRouter, Depends
from controller.controller_dependencies import get_analyzer_service, rate_limiter
from model.api import SearchModeRequest, SearchRequest, StateResponse
from service.analyzer_service import AnalyzerService
from util.constants import InternalURIs

search_router = APIRouter(dependencies=[Depends(rate_limiter)])


@search_router.put(InternalURIs.SEARCH_MODE, response_model=StateResponse)
async def set_search_mode(
    payload: SearchModeRequest,
    service: AnalyzerService = Depends(get_analyzer_service),
) -> StateResponse:
    service.set_search_mode(payload.mode)
    return service.snapshot()


@search_router.post(InternalURIs.SEARCH, response_model=StateResponse)
async def search(
    payload: SearchRequest,
    service: AnalyzerService = Depends(get_analyzer_service),
) -> StateResponse:
    # Backend failures land in the snapshot's `error` slot, not an HTTP error.
    await service.search(payload.code, mode=payload.mode)
    return service.snapshot()


@search_router.post(InternalURIs.SEARCH_RETRY, response_model=StateResponse)
async def retry_search(
    service: AnalyzerService = Depends(get_analyzer_service),
) -> StateResponse:
    await service.retry()
    return service.snapshot()
