"""
Short identifier generation.

IDs are `SHORTEN_ID_LENGTH` characters drawn uniformly from the 62-character
alphanumeric alphabet. The generator is seeded from the clock and is not
cryptographically secure; uniqueness is left to the storage layer.
"""

import random
import re
import threading
import time
from typing import Callable, Optional

ALPHABET = "abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789"
SHORTEN_ID_LENGTH = 8
SHORTEN_ID_PATTERN = re.compile(r"^[A-Za-z0-9]+$")

IDGenerator = Callable[[int], str]  # (length) -> id


class RandomIDGenerator:
    """Callable producing random alphanumeric IDs of a requested length."""

    def __init__(self, seed: Optional[int] = None) -> None:
        self._rng = random.Random(time.time_ns() if seed is None else seed)
        self._lock = threading.Lock()

    def __call__(self, length: int = SHORTEN_ID_LENGTH) -> str:
        if length <= 0:
            raise ValueError("length must be positive")
        with self._lock:
            return "".join(self._rng.choice(ALPHABET) for _ in range(length))


_default_generator = RandomIDGenerator()


def generate(length: int = SHORTEN_ID_LENGTH) -> str:
    """Generate one ID with the process-wide generator."""
    return _default_generator(length)


def is_valid_shorten_id(value: str) -> bool:
    return bool(value) and len(value) <= 32 and bool(SHORTEN_ID_PATTERN.match(value))
