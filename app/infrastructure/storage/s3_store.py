# app/infrastructure/storage/s3_store.py
import logging
import threading
from typing import BinaryIO, Iterator

from boto3.exceptions import S3UploadFailedError
from boto3.s3.transfer import TransferConfig
from botocore.exceptions import BotoCoreError, ClientError

from app.core.exceptions import ContentIOError, ContentNotFoundError
from app.core.metrics import STORE_OPS
from app.domain.repositories.content_store_interface import ByteSource, IContentStore
from app.infrastructure.storage.chunks import ChunkIterator
from app.infrastructure.storage.locks import KeyedLocks

logger = logging.getLogger("storage")

_MIN_PART_SIZE = 5 * 1024 * 1024  # mínimo do multipart do S3
_MISSING_CODES = {"NoSuchKey", "404", "NotFound"}


class _ByteCounter:
    def __init__(self):
        self._lock = threading.Lock()
        self.total = 0

    def __call__(self, n: int) -> None:
        with self._lock:
            self.total += n


def build_s3_key(prefix: str, video_id: int) -> str:
    prefix = prefix.strip("/")
    return f"{prefix}/{video_id}/data" if prefix else f"{video_id}/data"


class S3ContentStore(IContentStore):
    """
    Payloads num bucket S3 (ou LocalStack), chave <prefix>/<id>/data.

    upload_fileobj faz multipart com partes de tamanho fixo; se falhar,
    o upload é abortado e o objeto anterior continua valendo.
    """

    backend = "s3"

    def __init__(self, client, bucket: str, prefix: str = "videos", chunk_size: int = 64 * 1024):
        super().__init__(chunk_size)
        self._s3 = client
        self.bucket = bucket
        self.prefix = prefix
        self._transfer = TransferConfig(
            multipart_chunksize=max(chunk_size, _MIN_PART_SIZE),
            io_chunksize=chunk_size,
            use_threads=False,
        )
        self._write_locks = KeyedLocks()

    def _key(self, video_id: int) -> str:
        return build_s3_key(self.prefix, video_id)

    def exists(self, video_id: int) -> bool:
        try:
            self._s3.head_object(Bucket=self.bucket, Key=self._key(video_id))
            return True
        except ClientError as e:
            if e.response.get("Error", {}).get("Code") in _MISSING_CODES:
                return False
            raise ContentIOError(f"falha ao consultar storage: {e}", video_id=video_id, op="head") from e

    def check(self) -> None:
        try:
            self._s3.head_bucket(Bucket=self.bucket)
        except (BotoCoreError, ClientError) as e:
            raise ContentIOError(f"bucket {self.bucket} indisponível: {e}", op="check") from e

    def put(self, video_id: int, source: ByteSource | BinaryIO) -> int:
        key = self._key(video_id)
        counter = _ByteCounter()
        with self._write_locks.hold(video_id):
            try:
                self._s3.upload_fileobj(source, self.bucket, key, Config=self._transfer, Callback=counter)
            except (BotoCoreError, ClientError, S3UploadFailedError, OSError, ValueError) as e:
                STORE_OPS.labels(backend=self.backend, op="put", status="error").inc()
                raise ContentIOError(
                    f"falha ao gravar conteúdo do video {video_id}: {e}", video_id=video_id, op="put"
                ) from e

        STORE_OPS.labels(backend=self.backend, op="put", status="ok").inc()
        logger.info(
            "conteúdo gravado em s3://%s/%s", self.bucket, key,
            extra={"video_id": video_id, "size_bytes": counter.total, "backend": self.backend},
        )
        return counter.total

    def read_chunks(self, video_id: int) -> Iterator[bytes]:
        try:
            resp = self._s3.get_object(Bucket=self.bucket, Key=self._key(video_id))
        except ClientError as e:
            if e.response.get("Error", {}).get("Code") in _MISSING_CODES:
                STORE_OPS.labels(backend=self.backend, op="get", status="not_found").inc()
                raise ContentNotFoundError(video_id)
            STORE_OPS.labels(backend=self.backend, op="get", status="error").inc()
            raise ContentIOError(f"falha ao ler do storage: {e}", video_id=video_id, op="get") from e
        except BotoCoreError as e:
            STORE_OPS.labels(backend=self.backend, op="get", status="error").inc()
            raise ContentIOError(f"falha ao ler do storage: {e}", video_id=video_id, op="get") from e

        return ChunkIterator(
            resp["Body"], self.chunk_size, video_id,
            read_errors=(OSError, BotoCoreError),
            on_done=self._count_get,
        )

    def _count_get(self, status: str) -> None:
        STORE_OPS.labels(backend=self.backend, op="get", status=status).inc()
