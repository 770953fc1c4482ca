"""In-memory TTL cache for rendered map layers.

Rendered layers depend on the loaded dataset as well as on their arguments,
so ``storage.memory.set_dataset`` flushes this cache whenever the dataset is
swapped.
"""

from __future__ import annotations

import logging
import time
from functools import wraps
from typing import Any, Callable, Hashable

logger = logging.getLogger(__name__)

# (function name, args, kwargs) -> (expiry timestamp, value)
_layers: dict[tuple[Hashable, ...], tuple[float, Any]] = {}

DEFAULT_TTL = 300


def cached(ttl: int = DEFAULT_TTL):
    """Keep the result of a layer renderer for *ttl* seconds.

    Arguments are part of the key and must be hashable (level names, limits).
    """
    def decorator(func: Callable) -> Callable:
        @wraps(func)
        def wrapper(*args, **kwargs):
            key = (func.__qualname__, args, tuple(sorted(kwargs.items())))
            entry = _layers.get(key)
            now = time.monotonic()
            if entry is not None and now < entry[0]:
                return entry[1]
            value = func(*args, **kwargs)
            _layers[key] = (now + ttl, value)
            return value
        return wrapper
    return decorator


def clear_cache() -> int:
    """Drop every rendered layer. Returns the number of evicted entries."""
    evicted = len(_layers)
    _layers.clear()
    if evicted:
        logger.info("Evicted %d cached layer(s)", evicted)
    return evicted
