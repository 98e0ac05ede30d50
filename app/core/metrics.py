from fastapi import APIRouter, Response
from prometheus_client import Counter, Histogram, generate_latest, CONTENT_TYPE_LATEST

# HTTP
REQUESTS = Counter("http_requests_total", "HTTP requests", ["path", "method", "status"])
LATENCY  = Histogram(
    "http_request_duration_seconds", "HTTP request duration (s)", ["path", "method"],
    buckets=(0.05,0.1,0.2,0.5,1,2,5,10)
)

# Domínio
UPLOAD_BYTES = Counter("video_upload_bytes_total", "Total bytes stored by content uploads")
DOWNLOAD_BYTES = Counter("video_download_bytes_total", "Total bytes streamed by content downloads")
STORE_OPS = Counter("content_store_operations_total", "Content store operations", ["backend","op","status"])  # op: put,get,stream
CATALOG_OPS = Counter("catalog_operations_total", "Catalog operations", ["op","status"])                    # op: create,get,mark_ready

router_metrics = APIRouter()
@router_metrics.get("/metrics")
def metrics():
    return Response(generate_latest(), media_type=CONTENT_TYPE_LATEST)
