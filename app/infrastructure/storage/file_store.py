# app/infrastructure/storage/file_store.py
import logging
import os
import tempfile
from pathlib import Path
from typing import BinaryIO, Iterator

from app.core.exceptions import ContentIOError, ContentNotFoundError
from app.core.metrics import STORE_OPS
from app.domain.repositories.content_store_interface import ByteSource, IContentStore
from app.infrastructure.storage.chunks import ChunkIterator
from app.infrastructure.storage.locks import KeyedLocks

logger = logging.getLogger("storage")


class FileContentStore(IContentStore):
    """
    Payloads em disco, um arquivo por vídeo: <root>/<id>.bin

    O put grava num arquivo temporário no mesmo diretório e só publica
    com os.replace quando a cópia termina. Leitores que já abriram o
    arquivo antigo continuam lendo o conteúdo antigo.
    """

    backend = "filesystem"

    def __init__(self, root: str | os.PathLike, chunk_size: int = 64 * 1024):
        super().__init__(chunk_size)
        self.root = Path(root)
        self.root.mkdir(parents=True, exist_ok=True)
        self._write_locks = KeyedLocks()

    def _path(self, video_id: int) -> Path:
        return self.root / f"{video_id}.bin"

    def exists(self, video_id: int) -> bool:
        return self._path(video_id).is_file()

    def check(self) -> None:
        if not self.root.is_dir() or not os.access(self.root, os.W_OK):
            raise ContentIOError(f"diretório de storage indisponível: {self.root}", op="check")

    def put(self, video_id: int, source: ByteSource | BinaryIO) -> int:
        with self._write_locks.hold(video_id):
            try:
                fd, tmp_name = tempfile.mkstemp(dir=self.root, prefix=f".{video_id}.", suffix=".part")
            except OSError as e:
                STORE_OPS.labels(backend=self.backend, op="put", status="error").inc()
                raise ContentIOError(
                    f"falha ao criar arquivo temporário para o video {video_id}: {e}", video_id=video_id, op="put"
                ) from e
            size = 0
            try:
                with os.fdopen(fd, "wb") as out:
                    while True:
                        chunk = source.read(self.chunk_size)
                        if not chunk:
                            break
                        out.write(chunk)
                        size += len(chunk)
                    out.flush()
                    os.fsync(out.fileno())
                os.replace(tmp_name, self._path(video_id))
            # ValueError: origem já fechada
            except (OSError, ValueError) as e:
                STORE_OPS.labels(backend=self.backend, op="put", status="error").inc()
                raise ContentIOError(
                    f"falha ao gravar conteúdo do video {video_id}: {e}", video_id=video_id, op="put"
                ) from e
            finally:
                # se o replace aconteceu o temporário já não existe
                if os.path.exists(tmp_name):
                    os.unlink(tmp_name)

        STORE_OPS.labels(backend=self.backend, op="put", status="ok").inc()
        logger.info("conteúdo gravado", extra={"video_id": video_id, "size_bytes": size, "backend": self.backend})
        return size

    def read_chunks(self, video_id: int) -> Iterator[bytes]:
        try:
            fh = open(self._path(video_id), "rb")
        except FileNotFoundError:
            STORE_OPS.labels(backend=self.backend, op="get", status="not_found").inc()
            raise ContentNotFoundError(video_id)
        except OSError as e:
            STORE_OPS.labels(backend=self.backend, op="get", status="error").inc()
            raise ContentIOError(
                f"falha ao abrir conteúdo do video {video_id}: {e}", video_id=video_id, op="get"
            ) from e
        return ChunkIterator(fh, self.chunk_size, video_id, on_done=self._count_get)

    def _count_get(self, status: str) -> None:
        STORE_OPS.labels(backend=self.backend, op="get", status=status).inc()
