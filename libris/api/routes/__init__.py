"""API route initialization and versioning."""

from fastapi import APIRouter

from libris.api.routes import imports

# API v1 router - all versioned endpoints go under /api/v1
api_v1_router = APIRouter(prefix="/api/v1")

api_v1_router.include_router(imports.router)
