"""Inbound webhooks, mounted under /webhooks without bearer auth."""

from fastapi import APIRouter

from src.api.webhooks.whatsapp import router as whatsapp_router

router = APIRouter(prefix="/webhooks", tags=["Webhooks"])
router.include_router(whatsapp_router)

__all__ = ["router"]
