"""API routes, mounted under API_PREFIX."""

from fastapi import APIRouter

from app.api.v1 import auth, cards, health

router = APIRouter()
router.include_router(auth.router, tags=["auth"])
router.include_router(cards.router, tags=["cards"])
router.include_router(health.router, tags=["health"])
