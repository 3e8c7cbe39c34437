"""HTTP adapter for the short-link engine."""

from .app_factory import create_app

__all__ = ["create_app"]
