"""Erros de domínio do catálogo e do content store."""


class VideoServiceError(Exception):
    """Base de todos os erros do serviço."""


class NotFoundError(VideoServiceError):
    """Identificador desconhecido ou payload ausente."""

    def __init__(self, message: str, video_id: int | None = None):
        self.video_id = video_id
        super().__init__(message)


class VideoNotFoundError(NotFoundError):
    """Não existe registro no catálogo para o id."""

    def __init__(self, video_id: int):
        super().__init__(f"video {video_id} not found", video_id=video_id)


class ContentNotFoundError(NotFoundError):
    """O registro existe mas nenhum payload foi armazenado ainda."""

    def __init__(self, video_id: int):
        super().__init__(f"no content stored for video {video_id}", video_id=video_id)


class ContentIOError(VideoServiceError):
    """Falha de leitura/escrita durante uma transferência."""

    def __init__(self, message: str, video_id: int | None = None, op: str | None = None):
        self.video_id = video_id
        self.op = op
        super().__init__(message)


class InvalidInputError(VideoServiceError):
    """Reservado para validação de entrada (não usado hoje)."""
