"""API sub-routers assembled into a single api_router."""

from fastapi import APIRouter

from tabibi.api.routers.chat import router as chat_router

api_router = APIRouter()

api_router.include_router(chat_router, tags=["chat"])
