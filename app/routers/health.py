from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from .videos import get_video_service
from ..core.exceptions import ContentIOError
from ..services.video_service import VideoService

router = APIRouter(prefix="", tags=["health"])

@router.get("/health", include_in_schema=False)
def health():
    return {"status": "ok"}

@router.get("/health/ready", include_in_schema=False)
def ready(service: VideoService = Depends(get_video_service)):
    store = service.store
    try:
        store.check()
    except ContentIOError as e:
        return JSONResponse(
            status_code=503,
            content={"status": "unavailable", "backend": store.backend, "error": str(e)},
        )
    return {"status": "ok", "backend": store.backend}
