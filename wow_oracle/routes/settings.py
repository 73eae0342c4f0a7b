"""Health check and settings endpoints."""

from fastapi import APIRouter, Request

from wow_oracle.config import public_config

router = APIRouter()


@router.get("/health")
async def health():
    """Health check."""
    return {"status": "ok"}


@router.get("/settings")
async def get_settings(request: Request):
    """Effective configuration (API key masked)."""
    return public_config(request.app.state.config)
