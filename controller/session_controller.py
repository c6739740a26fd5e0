from fastapi import APIRouter, Depends
from controller.controller_dependencies import get_analyzer_service, rate_limiter
from model.api import (
    AdminLoginRequest,
    ProviderRequest,
    StateResponse,
    ViewModeRequest,
)
from service.analyzer_service import AnalyzerService
from util.constants import InternalURIs
from util.enums import ErrorMessage
from util.errors import AppError

session_router = APIRouter(dependencies=[Depends(rate_limiter)])


@session_router.get(InternalURIs.STATE, response_model=StateResponse)
async def get_state(
    service: AnalyzerService = Depends(get_analyzer_service),
) -> StateResponse:
    return service.snapshot()


@session_router.put(InternalURIs.PROVIDER, response_model=StateResponse)
async def switch_provider(
    payload: ProviderRequest,
    service: AnalyzerService = Depends(get_analyzer_service),
) -> StateResponse:
    await service.switch_provider(payload.provider)
    return service.snapshot()


@session_router.post(InternalURIs.THEME_TOGGLE, response_model=StateResponse)
async def toggle_theme(
    service: AnalyzerService = Depends(get_analyzer_service),
) -> StateResponse:
    await service.toggle_theme()
    return service.snapshot()


@session_router.post(InternalURIs.ADMIN_LOGIN, response_model=StateResponse)
async def admin_login(
    payload: AdminLoginRequest,
    service: AnalyzerService = Depends(get_analyzer_service),
) -> StateResponse:
    if not service.admin_login(payload.passcode):
        raise AppError(
            ErrorMessage.INCORRECT_PASSCODE.value.message,
            ErrorMessage.INCORRECT_PASSCODE.value.http_status,
        )
    return service.snapshot()


@session_router.post(InternalURIs.ADMIN_LOCK, response_model=StateResponse)
async def lock_admin(
    service: AnalyzerService = Depends(get_analyzer_service),
) -> StateResponse:
    service.lock_admin()
    return service.snapshot()


@session_router.put(InternalURIs.VIEW_MODE, response_model=StateResponse)
async def set_view_mode(
    payload: ViewModeRequest,
    service: AnalyzerService = Depends(get_analyzer_service),
) -> StateResponse:
    service.set_view_mode(payload.mode)
    return service.snapshot()
