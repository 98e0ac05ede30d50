from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class VideoState(str, Enum):
    PENDING = "PENDING"
    READY = "READY"


class VideoMetadata(BaseModel):
    """Metadados enviados pelo cliente (sem validação além do tipo)."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    title: str = ""
    subject: str = ""
    content_type: str = ""
    duration: int = Field(0, description="duração em segundos")
    location: Optional[str] = None


class VideoRecord(VideoMetadata):
    """Registro do catálogo. Imutável: mudanças de estado geram uma cópia."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    id: int
    data_url: str
    state: VideoState = VideoState.PENDING


class VideoStatus(BaseModel):
    state: VideoState
