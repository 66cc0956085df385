from fastapi import APIRouter

from motoshop.api.endpoints import (
    auth,
    bookings,
    documents,
    forms,
    health,
    motorcycles,
    shops,
    view,
)

# Create API router
api_router = APIRouter()

# Include endpoint routers with appropriate prefixes and tags
api_router.include_router(health.router, prefix="/health", tags=["health"])
api_router.include_router(view.router, prefix="/view", tags=["view"])
api_router.include_router(auth.router, prefix="/auth", tags=["auth"])
api_router.include_router(forms.router, prefix="/forms", tags=["forms"])
api_router.include_router(shops.router, prefix="/shops", tags=["shops"])
api_router.include_router(motorcycles.router, prefix="/motorcycles", tags=["motorcycles"])
api_router.include_router(bookings.router, prefix="/bookings", tags=["bookings"])
api_router.include_router(documents.router, prefix="/documents", tags=["documents"])
