from __future__ import annotations

# Importing a module registers its @app.callback handlers
from . import shared, employees, dashboard, travel, documents  # noqa: F401
from .crud import register_crud_callbacks

__all__ = ["register_crud_callbacks"]
