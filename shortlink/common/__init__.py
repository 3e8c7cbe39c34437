"""Common utilities for the short-link service."""

from .validators import is_valid_url, normalize_url
from .headers import build_base_url, forwarded_origin
from .url_builder import build_short_url
from .logging_config import setup_logging, get_logger

__all__ = [
    "is_valid_url",
    "normalize_url",
    "forwarded_origin",
    "build_base_url",
    "build_short_url",
    "setup_logging",
    "get_logger",
]
