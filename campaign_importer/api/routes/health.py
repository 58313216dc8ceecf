from fastapi import APIRouter

from campaign_importer.core.config import settings

router = APIRouter(prefix="/health", tags=["health"])


@router.get("/ping")
async def ping() -> dict[str, str]:
    return {"status": "ok", "app": settings.app_name}
