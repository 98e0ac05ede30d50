from urllib.parse import urlsplit

_DEFAULT_PORTS = {"http": 80, "https": 443}


def base_url_from(scheme: str, host: str, port: int | None) -> str:
    """Monta "scheme://host[:port]", omitindo a porta padrão do esquema."""
    # literal IPv6 chega sem colchetes (urlsplit/starlette .hostname)
    if ":" in host and not host.startswith("["):
        host = f"[{host}]"
    base = f"{scheme}://{host}"
    if port is not None and port != _DEFAULT_PORTS.get(scheme):
        base += f":{port}"
    return base


def normalize_base_url(url: str) -> str:
    parts = urlsplit(url)
    if not parts.scheme or not parts.hostname:
        raise ValueError(f"base url inválida: {url!r}")
    try:
        port = parts.port
    except ValueError as e:
        raise ValueError(f"base url inválida: {url!r}") from e
    return base_url_from(parts.scheme, parts.hostname, port) + parts.path.rstrip("/")


def build_data_url(base_url: str, video_id: int) -> str:
    return f"{base_url.rstrip('/')}/video/{video_id}/data"
