# app/domain/repositories/content_store_interface.py
from abc import ABC, abstractmethod
from typing import BinaryIO, Iterator, Protocol

from app.core.exceptions import ContentIOError


class ByteSource(Protocol):
    def read(self, size: int = -1) -> bytes: ...


class ByteSink(Protocol):
    def write(self, data: bytes) -> object: ...


class IContentStore(ABC):
    """Contrato do armazenamento de payloads binários (id -> bytes).

    Não conhece metadados: quem chama deve validar o id no catálogo antes.
    O sink passado a copy_to é do chamador, que deve fechá-lo.
    """

    backend: str = "unknown"

    def __init__(self, chunk_size: int = 64 * 1024):
        self.chunk_size = chunk_size

    @abstractmethod
    def put(self, video_id: int, source: ByteSource | BinaryIO) -> int:
        """Consome a origem inteira e substitui o payload do id. Retorna bytes gravados."""
        pass

    @abstractmethod
    def read_chunks(self, video_id: int) -> Iterator[bytes]:
        """Abre o payload já na chamada e devolve um iterador de blocos."""
        pass

    @abstractmethod
    def exists(self, video_id: int) -> bool:
        pass

    def check(self) -> None:
        """Levanta ContentIOError se o backend não estiver utilizável."""
        self.exists(-1)

    def copy_to(self, video_id: int, sink: ByteSink | BinaryIO) -> int:
        """Copia o payload inteiro para o sink. Retorna bytes escritos."""
        chunks = self.read_chunks(video_id)
        written = 0
        try:
            for chunk in chunks:
                sink.write(chunk)
                written += len(chunk)
        # ValueError: escrita em arquivo já fechado
        except (OSError, ValueError) as e:
            raise ContentIOError(
                f"falha ao copiar conteúdo do video {video_id}: {e}", video_id=video_id, op="get"
            ) from e
        finally:
            close = getattr(chunks, "close", None)
            if close:
                close()
        return written
