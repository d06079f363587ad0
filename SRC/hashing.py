"""Fixed 32-bit hash functions shared by ring positions and lookup keys.

Both functions are seedless so two processes fed the same nodes build the
same ring.
"""
from __future__ import annotations

from typing import Callable, Dict, Union
import zlib

try:
    import xxhash
except ImportError as e:
    raise RuntimeError("xxhash is required. Install with: pip install xxhash") from e

HashFunction = Callable[[str], int]

MASK_32 = 0xFFFFFFFF


def crc32(key: str) -> int:
    return zlib.crc32(key.encode("utf-8")) & MASK_32


def xxh32(key: str) -> int:
    return xxhash.xxh32_intdigest(key.encode("utf-8"), seed=0)


HASH_FUNCTIONS: Dict[str, HashFunction] = {
    "crc32": crc32,
    "xxh32": xxh32,
}


def get_hash_function(hash_function: Union[str, HashFunction]) -> HashFunction:
    """Resolve a registry name or pass a callable through unchanged."""
    if callable(hash_function):
        return hash_function
    try:
        return HASH_FUNCTIONS[hash_function]
    except KeyError:
        known = ", ".join(sorted(HASH_FUNCTIONS))
        raise ValueError(f"Unknown hash function {hash_function!r} (known: {known})") from None


def hash_name(hash_function: HashFunction) -> str:
    for name, fn in HASH_FUNCTIONS.items():
        if fn is hash_function:
            return name
    return getattr(hash_function, "__name__", repr(hash_function))
