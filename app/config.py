# app/config.py
from typing import Literal, Optional
from pydantic import Field, AliasChoices, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from app.utils.urls import normalize_base_url


class Settings(BaseSettings):

    # Storage do payload (filesystem local ou S3/LocalStack)
    storage_backend: Literal["filesystem", "s3"] = Field(
        "filesystem",
        validation_alias=AliasChoices("STORAGE_BACKEND", "storage_backend"),
    )
    storage_dir: str = Field(
        "data/videos",
        validation_alias=AliasChoices("STORAGE_DIR", "storage_dir"),
    )
    chunk_size: int = Field(
        64 * 1024,
        validation_alias=AliasChoices("CHUNK_SIZE", "chunk_size"),
    )

    # Base usada no dataUrl; se vazio, deriva do request
    public_base_url: Optional[str] = Field(
        None,
        validation_alias=AliasChoices("PUBLIC_BASE_URL", "public_base_url"),
    )

    aws_region: str = "us-east-1"
    aws_endpoint_url: Optional[str] = None
    s3_bucket: str = "video-service-bucket"
    s3_prefix: str = "videos"

    log_level: str = "INFO"

    # pydantic-settings v2
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="",   # sem prefixo
        extra="ignore",
    )

    @field_validator("chunk_size")
    @classmethod
    def _chunk_size_positive(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("chunk_size deve ser > 0")
        return v

    @field_validator("public_base_url")
    @classmethod
    def _public_base_url_valid(cls, v: Optional[str]) -> Optional[str]:
        if not v:
            return None
        return normalize_base_url(v)

settings = Settings()
