"""Version 1 API routers."""

from . import comparison, health

__all__ = ["comparison", "health"]
