from fastapi import FastAPI
from controller.document_controller import document_router
from controller.entry_controller import entry_router
from controller.proxy_controller import proxy_router
from controller.search_controller import search_router
from controller.session_controller import session_router


def register_routes(app: FastAPI) -> None:
    """Register & Access control controllers here."""
    app.include_router(session_router)
    app.include_router(document_router)
    app.include_router(entry_router)
    app.include_router(search_router)
    app.include_router(proxy_router)
