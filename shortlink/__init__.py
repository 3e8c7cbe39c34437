"""Short-link resolution engine."""

from .errors import (
    CodeTakenError,
    ExpiredError,
    GenerationExhaustedError,
    NotFoundError,
    ShortLinkError,
    StoreError,
    ValidationError,
)
from .shortcode import ShortCodeGenerator
from .service import URLShortenerService

__all__ = [
    "CodeTakenError",
    "ExpiredError",
    "GenerationExhaustedError",
    "NotFoundError",
    "ShortLinkError",
    "StoreError",
    "ValidationError",
    "ShortCodeGenerator",
    "URLShortenerService",
]
