from . import api, app

from .exceptions import ImgHostError

from .api.fastapi import create_app
from .app.settings import HostSettings, load_settings

__all__ = [
    # Modules
    "app",
    "api",
    # Base exception
    "ImgHostError",
    # App factory and config
    "create_app",
    "HostSettings",
    "load_settings",
]
