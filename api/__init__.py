from __future__ import annotations

from .client import (
    ApiClient,
    ApiError,
    configure_client,
    get_client,
    set_client,
    describe_current_client,
)
from .resources import RESOURCES, resource_path

__all__ = [
    "ApiClient", "ApiError",
    "configure_client", "get_client", "set_client", "describe_current_client",
    "RESOURCES", "resource_path",
]
