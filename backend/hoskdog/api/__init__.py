"""API route definitions for the HOSKDOG backend."""

from fastapi import APIRouter

from .deposit import router as deposit_router
from .faucet import router as faucet_router
from .relationships import router as relationships_router


api_router = APIRouter(prefix="/api")
api_router.include_router(deposit_router)
api_router.include_router(faucet_router)
api_router.include_router(relationships_router)


__all__ = ["api_router"]
