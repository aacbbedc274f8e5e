"""Route registration helpers."""

from __future__ import annotations

from fastapi import APIRouter

from .analytics import router as analytics_router

api_router = APIRouter()
api_router.include_router(analytics_router, prefix="/analytics", tags=["analytics"])

__all__ = ["api_router"]
