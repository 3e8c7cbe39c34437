"""Test doubles shared across test modules."""

from typing import List

from shortlink.database.cache import MemoryCache
from shortlink.shortcode import ShortCodeGenerator


class ScriptedGenerator(ShortCodeGenerator):
    """Generator that hands out a fixed list of candidates in order."""

    def __init__(self, candidates: List[str], default_length: int = 6):
        super().__init__(default_length=default_length)
        self.candidates = list(candidates)
        self.calls = 0

    def generate(self) -> str:
        code = self.candidates[self.calls]
        self.calls += 1
        return code


class FailingCache(MemoryCache):
    """Cache whose every call fails like an unreachable server."""

    def __init__(self, error: Exception):
        super().__init__()
        self.error = error

    async def get(self, key):
        raise self.error

    async def set(self, key, value, ttl=None):
        raise self.error

    async def delete(self, key):
        raise self.error

    async def exists(self, key):
        raise self.error
