from typing import Callable, Iterator, Optional

from app.core.exceptions import ContentIOError


class ChunkIterator(Iterator[bytes]):
    """
    Lê um stream aberto em blocos de tamanho fixo e fecha o stream ao
    terminar, em erro, ou quando close() é chamado antes do fim.
    """

    def __init__(
        self,
        stream,
        chunk_size: int,
        video_id: int,
        read_errors: tuple = (OSError,),
        on_done: Optional[Callable[[str], None]] = None,
    ):
        self._stream = stream
        self._chunk_size = chunk_size
        self._video_id = video_id
        self._read_errors = read_errors
        self._on_done = on_done
        self._closed = False

    def __iter__(self) -> "ChunkIterator":
        return self

    def __next__(self) -> bytes:
        if self._closed:
            raise StopIteration
        try:
            chunk = self._stream.read(self._chunk_size)
        except self._read_errors as e:
            self._finish("error")
            raise ContentIOError(
                f"falha ao ler conteúdo do video {self._video_id}: {e}", video_id=self._video_id, op="get"
            ) from e
        if not chunk:
            self._finish("ok")
            raise StopIteration
        return chunk

    def _finish(self, status: str) -> None:
        if self._closed:
            return
        self._closed = True
        self._stream.close()
        if self._on_done:
            self._on_done(status)

    def close(self) -> None:
        self._finish("aborted")
