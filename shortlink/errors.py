"""Exception types raised by the short-link engine."""


class ShortLinkError(Exception):
    """Base class for all short-link errors."""

    def __init__(self, message: str = ""):
        super().__init__(message)
        self.message = message or self.__class__.__doc__ or ""

    def __str__(self) -> str:
        return self.message


class ValidationError(ShortLinkError, ValueError):
    """Invalid input supplied by the caller."""


class NotFoundError(ShortLinkError):
    """Short code never existed or has been deactivated."""

    def __init__(self, code: str):
        super().__init__(f"Short code '{code}' not found")
        self.code = code


class ExpiredError(ShortLinkError):
    """Short code exists but has expired."""

    def __init__(self, code: str):
        super().__init__(f"Short code '{code}' has expired")
        self.code = code


class CodeTakenError(ShortLinkError):
    """Short code is already owned by an active link."""

    def __init__(self, code: str = "", message: str = ""):
        super().__init__(message or f"Short code '{code}' already exists")
        self.code = code


class GenerationExhaustedError(CodeTakenError):
    """No unused short code found within the retry budget."""

    def __init__(self, attempts: int):
        super().__init__(
            message=f"Unable to generate unique short code after {attempts} attempts"
        )
        self.attempts = attempts


class StoreError(ShortLinkError):
    """Persistent store failed or timed out."""


class CacheError(ShortLinkError):
    """Cache failed or timed out."""
