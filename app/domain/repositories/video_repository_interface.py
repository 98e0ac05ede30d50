# app/domain/repositories/video_repository_interface.py
from abc import ABC, abstractmethod
from typing import List

from app.domain.models.video import VideoMetadata, VideoRecord


class IVideoRepository(ABC):
    """Contrato do catálogo de vídeos (id -> registro)"""

    @abstractmethod
    def create(self, metadata: VideoMetadata, base_url: str) -> VideoRecord:
        """Atribui o próximo id e registra o vídeo como PENDING"""
        pass

    @abstractmethod
    def list(self) -> List[VideoRecord]:
        """Todos os registros, em ordem de inserção"""
        pass

    @abstractmethod
    def get(self, video_id: int) -> VideoRecord:
        """Busca pelo id; levanta VideoNotFoundError se não existir"""
        pass

    @abstractmethod
    def mark_ready(self, video_id: int) -> VideoRecord:
        """Marca o vídeo como READY (idempotente)"""
        pass

    @abstractmethod
    def count(self) -> int:
        pass
