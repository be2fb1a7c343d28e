# src/router/routers.py

from fastapi import FastAPI
from src.modules.queue.queue_controller import router as queue_router
from src.modules.room.room_controller import router as room_router
from src.modules.clinical.clinical_controller import router as clinical_router
from src.modules.settings.settings_controller import router as settings_router

def include_routers(app: FastAPI) -> None:
    """Include all API routers in the FastAPI application."""
    app.include_router(queue_router)
    app.include_router(room_router)
    app.include_router(clinical_router)
    app.include_router(settings_router)
