from fastapi import APIRouter

from . import health, imports, recipients

api_router = APIRouter()
api_router.include_router(health.router)
api_router.include_router(imports.router)
api_router.include_router(recipients.router)
