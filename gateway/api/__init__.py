"""HTTP API: routes and dependencies."""

from gateway.api.router import api_router

__all__ = ["api_router"]
