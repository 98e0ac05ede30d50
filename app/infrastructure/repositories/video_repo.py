# app/infrastructure/repositories/video_repo.py
import itertools
import threading
from typing import Dict, List

from app.core.exceptions import VideoNotFoundError
from app.core.metrics import CATALOG_OPS
from app.domain.models.video import VideoMetadata, VideoRecord, VideoState
from app.domain.repositories.video_repository_interface import IVideoRepository
from app.utils.urls import build_data_url


class VideoRepo(IVideoRepository):
    """
    Catálogo em memória. Um único lock protege o contador de ids,
    o mapa id -> registro e a listagem em ordem de inserção.
    Os registros são imutáveis; mark_ready troca o registro por uma cópia.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._ids = itertools.count()
        self._records: Dict[int, VideoRecord] = {}
        self._order: List[int] = []

    def create(self, metadata: VideoMetadata, base_url: str) -> VideoRecord:
        with self._lock:
            video_id = next(self._ids)
            record = VideoRecord(
                **metadata.model_dump(),
                id=video_id,
                data_url=build_data_url(base_url, video_id),
                state=VideoState.PENDING,
            )
            self._records[video_id] = record
            self._order.append(video_id)
        CATALOG_OPS.labels(op="create", status="ok").inc()
        return record

    def list(self) -> List[VideoRecord]:
        with self._lock:
            return [self._records[i] for i in self._order]

    def get(self, video_id: int) -> VideoRecord:
        # busca por chave, nunca por posição na listagem
        with self._lock:
            record = self._records.get(video_id)
        if record is None:
            CATALOG_OPS.labels(op="get", status="not_found").inc()
            raise VideoNotFoundError(video_id)
        return record

    def mark_ready(self, video_id: int) -> VideoRecord:
        with self._lock:
            record = self._records.get(video_id)
            if record is None:
                CATALOG_OPS.labels(op="mark_ready", status="not_found").inc()
                raise VideoNotFoundError(video_id)
            if record.state is not VideoState.READY:
                record = record.model_copy(update={"state": VideoState.READY})
                self._records[video_id] = record
        CATALOG_OPS.labels(op="mark_ready", status="ok").inc()
        return record

    def count(self) -> int:
        with self._lock:
            return len(self._records)
