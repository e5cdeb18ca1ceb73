from urllib.parse import quote

_ENDPOINT_MAP = {
    "config": "openidm/config",
}


def endpoint_url(base_url: str, name: str, *parts: str) -> str:
    """Return the URL of one of the configured endpoints, with optional sub-path."""
    try:
        path = _ENDPOINT_MAP[name]
    except KeyError as exc:
        raise ValueError(f"No endpoint configured for '{name}'") from exc
    url = f"{base_url.rstrip('/')}/{path}"
    for part in parts:
        # entity ids keep their '/' separators
        url = f"{url}/{quote(part, safe='/')}"
    return url


def config_url(base_url: str, entity_id: str = "") -> str:
    return endpoint_url(base_url, "config", entity_id) if entity_id else endpoint_url(base_url, "config")


def type_query_filter(type_: str) -> str:
    return f"_id sw '{type_}'"


__all__ = ["endpoint_url", "config_url", "type_query_filter"]
