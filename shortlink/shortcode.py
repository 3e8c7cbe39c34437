"""Short code generation utilities.

Two strategies produce codes over the same Base62 alphabet and are checked
by the same validator:

- RandomStrategy: uniform random codes from a cryptographically secure source.
- SequentialStrategy: deterministic encoding of a numeric id, collision-free
  by construction but reveals ordering.
"""

import itertools
import secrets
import string
import threading
from abc import ABC, abstractmethod
from typing import Dict, Optional, Type


# Base62 characters: digits, uppercase, lowercase
BASE62_CHARS = string.digits + string.ascii_uppercase + string.ascii_lowercase
BASE = len(BASE62_CHARS)

MIN_CODE_LENGTH = 4
MAX_CODE_LENGTH = 12
DEFAULT_CODE_LENGTH = 7

_CHAR_INDEX = {c: i for i, c in enumerate(BASE62_CHARS)}


def clamp_length(length: Optional[int]) -> int:
    """Clamp a requested code length into [MIN_CODE_LENGTH, MAX_CODE_LENGTH]."""
    if length is None:
        return DEFAULT_CODE_LENGTH
    return max(MIN_CODE_LENGTH, min(MAX_CODE_LENGTH, int(length)))


def is_valid_code(code: str) -> bool:
    """Check that a code has a valid length and only Base62 characters.

    Args:
        code: Code to validate

    Returns:
        True if valid
    """
    if not isinstance(code, str):
        return False
    if not MIN_CODE_LENGTH <= len(code) <= MAX_CODE_LENGTH:
        return False
    return all(c in _CHAR_INDEX for c in code)


def int_to_base62(num: int, length: int = 0) -> str:
    """Convert a non-negative integer to base62, left-padded to length.

    Args:
        num: Integer to convert
        length: Minimum length of the result

    Returns:
        Base62 string
    """
    if num < 0:
        raise ValueError("num must be non-negative")

    result = []
    while num > 0:
        num, remainder = divmod(num, BASE)
        result.append(BASE62_CHARS[remainder])

    code = "".join(reversed(result)) or BASE62_CHARS[0]
    return code.rjust(length, BASE62_CHARS[0])


def base62_to_int(code: str) -> int:
    """Convert a base62 string back to an integer.

    Raises:
        ValueError: If the code contains characters outside the alphabet
    """
    result = 0
    for char in code:
        try:
            result = result * BASE + _CHAR_INDEX[char]
        except KeyError:
            raise ValueError(f"Invalid base62 character: {char!r}") from None
    return result


def collision_probability(num_codes: int, length: int) -> float:
    """Approximate birthday-problem collision probability.

    p = k^2 / (2 * 62^L), capped at 1.0.

    Args:
        num_codes: Number of codes already stored (k)
        length: Code length (L)

    Returns:
        Probability in [0, 1]
    """
    if num_codes <= 0:
        return 0.0
    total_combinations = float(BASE ** length)
    return min(1.0, (num_codes * num_codes) / (2.0 * total_combinations))


class CodeStrategy(ABC):
    """Base class for short code strategies."""

    def __init__(self, length: Optional[int] = None):
        self.length = clamp_length(length)

    @abstractmethod
    def generate(self) -> str:
        """Produce the next candidate code."""

    def is_valid(self, code: str) -> bool:
        return is_valid_code(code)


class RandomStrategy(CodeStrategy):
    """Uniformly random codes drawn with the secrets module."""

    def generate(self) -> str:
        return "".join(secrets.choice(BASE62_CHARS) for _ in range(self.length))


class SequentialStrategy(CodeStrategy):
    """Codes derived from a monotonically increasing id.

    The in-process counter behind generate() restarts with the process, so
    anything persisted should take its id from the store and call from_id().
    """

    def __init__(self, length: Optional[int] = None, start: int = 1):
        super().__init__(length)
        self._lock = threading.Lock()
        self._counter = itertools.count(start)

    def generate(self) -> str:
        with self._lock:
            n = next(self._counter)
        return self.from_id(n)

    def from_id(self, id_: int) -> str:
        """Encode a non-negative integer as a code of at least the configured length.

        Args:
            id_: Numeric id

        Returns:
            Base62 code

        Raises:
            ValueError: If id_ is negative or does not fit in MAX_CODE_LENGTH symbols
        """
        if id_ < 0:
            raise ValueError("id must be non-negative")
        code = int_to_base62(id_, self.length)
        if len(code) > MAX_CODE_LENGTH:
            raise ValueError(f"id {id_} does not fit in {MAX_CODE_LENGTH} characters")
        return code

    def decode(self, code: str) -> int:
        return base62_to_int(code)


STRATEGIES: Dict[str, Type[CodeStrategy]] = {
    "random": RandomStrategy,
    "sequential": SequentialStrategy,
}


class ShortCodeGenerator:
    """Generate short codes for URLs."""

    def __init__(self, default_length: int = DEFAULT_CODE_LENGTH, strategy: str = "random"):
        """Initialize short code generator.

        Args:
            default_length: Length of generated codes (clamped to [4, 12])
            strategy: Strategy name, "random" or "sequential"
        """
        key = (strategy or "random").strip().lower()
        if key not in STRATEGIES:
            raise ValueError(f"Unknown code strategy: {strategy!r}")

        self.default_length = clamp_length(default_length)
        self.strategy_name = key
        self.strategy = STRATEGIES[key](self.default_length)
        self._sequential = (
            self.strategy
            if isinstance(self.strategy, SequentialStrategy)
            else SequentialStrategy(self.default_length)
        )

    @property
    def sequential(self) -> bool:
        """True when codes should come from store-assigned ids via from_id()."""
        return self.strategy_name == "sequential"

    def generate(self) -> str:
        """Generate a candidate code with the configured strategy."""
        return self.strategy.generate()

    def from_id(self, id_: int) -> str:
        """Deterministically encode a numeric id (see SequentialStrategy.from_id)."""
        return self._sequential.from_id(id_)

    def decode(self, code: str) -> int:
        """Invert from_id. Meaningless for random codes."""
        return self._sequential.decode(code)

    @staticmethod
    def is_valid(code: str) -> bool:
        return is_valid_code(code)

    def collision_probability(self, num_codes: int) -> float:
        """Collision probability at the configured length for num_codes stored codes."""
        return collision_probability(num_codes, self.default_length)
