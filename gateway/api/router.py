"""Router aggregation. Paths are fixed: the callback URL sent to GitHub is
https://<host>/callback."""

from fastapi import APIRouter

from gateway.api.endpoints import auth, callback, health, upload

api_router = APIRouter()

api_router.include_router(health.router, prefix="/health", tags=["health"])
api_router.include_router(auth.router, prefix="/auth", tags=["oauth"])
api_router.include_router(callback.router, prefix="/callback", tags=["oauth"])
api_router.include_router(upload.router, prefix="/upload", tags=["upload"])
