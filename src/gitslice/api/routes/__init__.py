"""API route registration for gitslice."""

from fastapi import APIRouter

from . import meta, slices

router = APIRouter()
router.include_router(meta.router)
router.include_router(slices.router)

__all__ = ["router"]
