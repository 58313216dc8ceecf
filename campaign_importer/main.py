from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from campaign_importer.api.routes import api_router
from campaign_importer.core.config import settings
from campaign_importer.core.logging_config import configure_logging

app = FastAPI(title=settings.app_name, version="0.1.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(api_router)


@app.on_event("startup")
def _startup() -> None:
    configure_logging()


@app.get("/", tags=["health"])
async def root() -> dict[str, str]:
    return {"message": f"{settings.app_name} ready"}
