from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse
from controller.controller_dependencies import get_proxy_service, rate_limiter
from service.proxy_service import ProxyService
from util.constants import InternalURIs

proxy_router = APIRouter(dependencies=[Depends(rate_limiter)])


@proxy_router.post(InternalURIs.GENERATE)
async def generate(
    request: Request,
    service: ProxyService = Depends(get_proxy_service),
) -> JSONResponse:
    try:
        body = await request.json()
    except ValueError:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"error": "Invalid request", "details": "Body must be JSON"},
        )
    code, payload = await service.forward(body)
    return JSONResponse(status_code=code, content=payload)
