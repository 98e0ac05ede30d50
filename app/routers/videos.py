# app/routers/videos.py
import logging
from typing import List

from fastapi import APIRouter, Depends, File, HTTPException, Request, UploadFile
from fastapi.responses import StreamingResponse

from ..config import settings
from ..core.exceptions import ContentIOError, ContentNotFoundError, NotFoundError, VideoNotFoundError
from ..domain.models.video import VideoMetadata, VideoRecord, VideoStatus
from ..services.video_service import VideoService
from ..utils.urls import base_url_from, normalize_base_url

router = APIRouter(
    prefix="/video",
    tags=["videos"],
)

logger = logging.getLogger("videos")


def get_video_service(request: Request) -> VideoService:
    # criado no lifespan (main.py)
    return request.app.state.video_service


def get_base_url(request: Request) -> str:
    if settings.public_base_url:
        try:
            return normalize_base_url(settings.public_base_url)
        except ValueError as e:
            # validado no Settings; só chega aqui se alterado em runtime
            logger.warning("PUBLIC_BASE_URL ignorada: %s", e)
    url = request.url
    return base_url_from(url.scheme, url.hostname or "localhost", url.port)


def _not_found(e: NotFoundError) -> HTTPException:
    if isinstance(e, ContentNotFoundError):
        return HTTPException(status_code=404, detail="Conteúdo do vídeo ainda não enviado")
    return HTTPException(status_code=404, detail="Vídeo não encontrado")


@router.get("", response_model=List[VideoRecord])
def list_videos(service: VideoService = Depends(get_video_service)) -> List[VideoRecord]:
    return service.list_videos()


@router.post("", response_model=VideoRecord)
def add_video(
    metadata: VideoMetadata,
    service: VideoService = Depends(get_video_service),
    base_url: str = Depends(get_base_url),
) -> VideoRecord:
    return service.submit_metadata(metadata, base_url)


@router.get("/{video_id}", response_model=VideoRecord)
def get_video(video_id: int, service: VideoService = Depends(get_video_service)) -> VideoRecord:
    try:
        return service.get_video(video_id)
    except VideoNotFoundError as e:
        raise _not_found(e)


@router.post("/{video_id}/data", response_model=VideoStatus)
def set_video_data(
    video_id: int,
    data: UploadFile = File(...),
    service: VideoService = Depends(get_video_service),
) -> VideoStatus:
    try:
        return service.upload_content(video_id, data.file)
    except NotFoundError as e:
        raise _not_found(e)
    except ContentIOError as e:
        logger.error("upload falhou: %s", e, extra={"video_id": video_id})
        raise HTTPException(status_code=500, detail="Falha ao salvar no storage")


@router.get("/{video_id}/data")
def get_video_data(video_id: int, service: VideoService = Depends(get_video_service)):
    try:
        record, chunks = service.stream_content(video_id)
    except NotFoundError as e:
        raise _not_found(e)
    except ContentIOError as e:
        logger.error("download falhou: %s", e, extra={"video_id": video_id})
        raise HTTPException(status_code=500, detail="Falha ao ler do storage")

    return StreamingResponse(chunks, media_type=record.content_type or "application/octet-stream")
