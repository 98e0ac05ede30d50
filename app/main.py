# app/main.py
from contextlib import asynccontextmanager
from fastapi import FastAPI, APIRouter, Request
from fastapi.middleware.cors import CORSMiddleware

from app.config import Settings, settings
from app.core.logging import setup_logging
from app.core.metrics import router_metrics
from app.domain.repositories.content_store_interface import IContentStore
from app.infrastructure.repositories.video_repo import VideoRepo
from app.middleware.observability import ObservabilityMiddleware
from app.routers import health as health_router
from app.routers import videos as videos_router
from app.services.video_service import VideoService

import logging

logger = logging.getLogger("app")


def build_content_store(cfg: Settings) -> IContentStore:
    if cfg.storage_backend == "s3":
        from app.aws import make_s3_client
        from app.infrastructure.storage.s3_store import S3ContentStore
        return S3ContentStore(make_s3_client(cfg), cfg.s3_bucket, cfg.s3_prefix, cfg.chunk_size)

    from app.infrastructure.storage.file_store import FileContentStore
    return FileContentStore(cfg.storage_dir, cfg.chunk_size)


router_debug = APIRouter(prefix="/debug", tags=["debug"])

@router_debug.get("/catalog-status")
def catalog_status(request: Request):
    service = getattr(request.app.state, "video_service", None)
    info = {
        "initialized": service is not None,
        "backend": getattr(getattr(service, "store", None), "backend", None),
        "videos": service.catalog.count() if service else 0,
        "ready": service.ready_count() if service else 0,
    }
    return info


@asynccontextmanager
async def lifespan(app: FastAPI):
    # startup
    setup_logging(settings.log_level)

    # catálogo e store criados aqui e injetados via Depends(get_video_service)
    store = build_content_store(settings)
    app.state.video_service = VideoService(VideoRepo(), store)
    logger.info("video service iniciado", extra={"backend": store.backend})

    try:
        yield
    finally:
        app.state.video_service = None


# --- App ---
app = FastAPI(
    title="Video Service",
    version="0.1.0",
    lifespan=lifespan,
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_middleware(ObservabilityMiddleware)

# Routers
app.include_router(videos_router.router)
app.include_router(health_router.router)
app.include_router(router_debug)
app.include_router(router_metrics)
