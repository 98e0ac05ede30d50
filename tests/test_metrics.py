import io
from typing import Dict

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from prometheus_client import generate_latest

import app.core.metrics as m
from app.core.exceptions import ContentIOError, ContentNotFoundError


# ---------- helpers ----------

def _metrics_text() -> str:
    """Captura o payload atual do Prometheus default registry."""
    return generate_latest().decode("utf-8", errors="ignore")


def _series_value(text: str, metric: str, labels: Dict[str, str] | None = None, suffix: str = "") -> float:
    """
    Retorna o valor numérico de uma série (counter/gauge/histogram_count) no exposition format.
    - labels: se fornecido, a série deve conter todos esses pares k="v"
    - suffix: ex.: "_count" para histograma
    Retorna 0.0 se a série ainda não existir.
    """
    target = metric + suffix
    # percorre linhas de amostra (ignora HELP/TYPE)
    for line in text.splitlines():
        if not line or line.startswith("#"):
            continue
        if not line.startswith(target):
            continue
        if labels:
            # exige que todos os pares apareçam na linha (ordem não importa)
            if not all(f'{k}="{v}"' in line for k, v in labels.items()):
                continue
        # extrai o último token como número
        try:
            val = float(line.split()[-1])
            return val
        except Exception:
            continue
    return 0.0


# ---------- tests ----------
# ---------- tests ----------

def test_metrics_endpoint_ok():
    app = FastAPI()
    app.include_router(m.router_metrics)

    with TestClient(app) as client:
        r = client.get("/metrics")
        assert r.status_code == 200
        # content-type padrão do Prometheus
        assert "text/plain" in r.headers.get("content-type", "")
        assert "# HELP http_requests_total" in r.text or "# TYPE http_requests_total" in r.text


def test_store_and_byte_counters_follow_service_calls(service):
    from app.domain.models.video import VideoMetadata

    before = _metrics_text()
    labels_put = {"backend": "filesystem", "op": "put", "status": "ok"}
    labels_get = {"backend": "filesystem", "op": "get", "status": "ok"}
    labels_create = {"op": "create", "status": "ok"}
    base_put = _series_value(before, "content_store_operations_total", labels_put)
    base_get = _series_value(before, "content_store_operations_total", labels_get)
    base_create = _series_value(before, "catalog_operations_total", labels_create)
    base_up = _series_value(before, "video_upload_bytes_total")
    base_down = _series_value(before, "video_download_bytes_total")

    service.submit_metadata(VideoMetadata(title="m"), "http://localhost")
    service.upload_content(0, io.BytesIO(b"x" * 3000))
    service.download_content(0, io.BytesIO())

    after = _metrics_text()
    assert _series_value(after, "catalog_operations_total", labels_create) >= base_create + 1
    assert _series_value(after, "content_store_operations_total", labels_put) >= base_put + 1
    assert _series_value(after, "content_store_operations_total", labels_get) >= base_get + 1
    assert _series_value(after, "video_upload_bytes_total") >= base_up + 3000
    assert _series_value(after, "video_download_bytes_total") >= base_down + 3000


def test_not_found_is_counted(service):
    labels = {"backend": "filesystem", "op": "get", "status": "not_found"}
    base = _series_value(_metrics_text(), "content_store_operations_total", labels)
    with pytest.raises(ContentNotFoundError):
        service.store.read_chunks(42)
    assert _series_value(_metrics_text(), "content_store_operations_total", labels) >= base + 1


def test_latency_histogram_has_buckets():
    labels_lat = {"path": "/lat", "method": "POST"}
    before = _metrics_text()
    base_count = _series_value(before, "http_request_duration_seconds", labels_lat, suffix="_count")
    m.LATENCY.labels(**labels_lat).observe(0.12)
    after = _metrics_text()
    assert _series_value(after, "http_request_duration_seconds", labels_lat, suffix="_count") >= base_count + 1
    assert any(
        line.startswith('http_request_duration_seconds_bucket')
        and 'le="0.2"' in line
        and f'path="{labels_lat["path"]}"' in line
        for line in after.splitlines()
    )


def test_stream_failure_after_first_chunk_is_counted(monkeypatch, service):
    from app.domain.models.video import VideoMetadata

    service.submit_metadata(VideoMetadata(title="m"), "http://localhost")
    service.upload_content(0, io.BytesIO(b"x" * 3000))

    def failing_chunks(video_id):
        yield b"x" * 1024
        raise ContentIOError("disco ilegível", video_id=video_id, op="get")
    monkeypatch.setattr(service.store, "read_chunks", failing_chunks)

    labels = {"backend": "filesystem", "op": "stream", "status": "error"}
    base = _series_value(_metrics_text(), "content_store_operations_total", labels)

    _, chunks = service.stream_content(0)
    assert next(chunks) == b"x" * 1024
    with pytest.raises(ContentIOError):
        next(chunks)
    assert _series_value(_metrics_text(), "content_store_operations_total", labels) >= base + 1


@pytest.mark.parametrize("consume,status", [(True, "ok"), (False, "aborted")])
def test_stream_completion_and_abort_are_counted(service, consume, status):
    from app.domain.models.video import VideoMetadata

    service.submit_metadata(VideoMetadata(title="m"), "http://localhost")
    service.upload_content(0, io.BytesIO(b"y" * 3000))

    labels = {"backend": "filesystem", "op": "stream", "status": status}
    base = _series_value(_metrics_text(), "content_store_operations_total", labels)

    _, chunks = service.stream_content(0)
    next(chunks)
    if consume:
        list(chunks)
    else:
        # cliente desconectou no meio do corpo
        chunks.close()
    assert _series_value(_metrics_text(), "content_store_operations_total", labels) >= base + 1
