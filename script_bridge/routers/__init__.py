"""Routers module - FastAPI route handlers"""

from . import config, scripts

__all__ = ["scripts", "config"]
