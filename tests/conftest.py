import os
import tempfile

import pytest

# STORAGE_DIR precisa existir antes de importar app.config/app.main
os.environ.setdefault("STORAGE_DIR", tempfile.mkdtemp(prefix="video-store-"))
os.environ.setdefault("STORAGE_BACKEND", "filesystem")

from app.infrastructure.repositories.video_repo import VideoRepo  # noqa: E402
from app.infrastructure.storage.file_store import FileContentStore  # noqa: E402
from app.services.video_service import VideoService  # noqa: E402


@pytest.fixture
def catalog():
    return VideoRepo()


@pytest.fixture
def file_store(tmp_path):
    # chunk pequeno para exercitar vários blocos com payloads pequenos
    return FileContentStore(tmp_path / "videos", chunk_size=1024)


@pytest.fixture
def service(catalog, file_store):
    return VideoService(catalog, file_store)
