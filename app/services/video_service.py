# app/services/video_service.py
import logging
from typing import BinaryIO, Iterator, List, Tuple

from app.core.exceptions import ContentIOError, ContentNotFoundError
from app.core.metrics import DOWNLOAD_BYTES, STORE_OPS, UPLOAD_BYTES
from app.domain.models.video import VideoMetadata, VideoRecord, VideoState, VideoStatus
from app.domain.repositories.content_store_interface import ByteSink, ByteSource, IContentStore
from app.domain.repositories.video_repository_interface import IVideoRepository

logger = logging.getLogger("videos")


class VideoService:
    """
    Junta o catálogo e o content store. O catálogo é sempre consultado
    antes do store: um id só existe se tiver registro no catálogo.
    """

    def __init__(self, catalog: IVideoRepository, store: IContentStore):
        self.catalog = catalog
        self.store = store

    def submit_metadata(self, metadata: VideoMetadata, base_url: str) -> VideoRecord:
        record = self.catalog.create(metadata, base_url)
        logger.info("vídeo registrado: %s", record.title, extra={"video_id": record.id})
        return record

    def list_videos(self) -> List[VideoRecord]:
        return self.catalog.list()

    def get_video(self, video_id: int) -> VideoRecord:
        return self.catalog.get(video_id)

    def upload_content(self, video_id: int, source: ByteSource | BinaryIO) -> VideoStatus:
        self.catalog.get(video_id)
        size = self.store.put(video_id, source)
        UPLOAD_BYTES.inc(size)
        record = self.catalog.mark_ready(video_id)
        logger.info("conteúdo disponível", extra={"video_id": video_id, "size_bytes": size})
        return VideoStatus(state=record.state)

    def download_content(self, video_id: int, sink: ByteSink | BinaryIO) -> int:
        self._ready_record(video_id)
        size = self.store.copy_to(video_id, sink)
        DOWNLOAD_BYTES.inc(size)
        return size

    def stream_content(self, video_id: int) -> Tuple[VideoRecord, Iterator[bytes]]:
        """Como download_content, mas devolve os blocos para uma resposta HTTP em streaming."""
        record = self._ready_record(video_id)
        chunks = self.store.read_chunks(video_id)
        return record, _counting(chunks, video_id, self.store.backend)

    def _ready_record(self, video_id: int) -> VideoRecord:
        # PENDING: nenhum upload concluiu neste processo; bytes antigos no store não valem
        record = self.catalog.get(video_id)
        if record.state is not VideoState.READY:
            raise ContentNotFoundError(video_id)
        return record

    def ready_count(self) -> int:
        return sum(1 for r in self.catalog.list() if r.state is VideoState.READY)


def _counting(chunks: Iterator[bytes], video_id: int, backend: str) -> Iterator[bytes]:
    # a resposta HTTP já saiu com 200; falhas no meio do corpo só aparecem aqui
    status = "aborted"
    try:
        for chunk in chunks:
            DOWNLOAD_BYTES.inc(len(chunk))
            yield chunk
        status = "ok"
    except ContentIOError as e:
        status = "error"
        logger.error("download interrompido: %s", e, extra={"video_id": video_id, "backend": backend})
        raise
    finally:
        STORE_OPS.labels(backend=backend, op="stream", status=status).inc()
        close = getattr(chunks, "close", None)
        if close:
            close()
