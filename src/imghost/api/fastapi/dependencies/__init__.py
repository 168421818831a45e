from .state import get_http_client, get_settings, get_store

__all__ = ["get_http_client", "get_settings", "get_store"]
