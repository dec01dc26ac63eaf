"""
Cart Session Registry for Kitchen Shop
======================================

Keeps one CartStore per shopping session in memory. Carts are session-only
by design: nothing here is written to the database, and a cart that is
evicted or lost on restart simply starts empty again.

Architecture Overview:
----------------------
- CART_CACHE maps session_id -> {"cart", "lock", "last_access"}
- Each session has its own lock. cart_session() holds it for the whole
  mutate-and-recompute step, so two requests against the same session can
  never interleave and lose an update. Different sessions never block each
  other.
- The registry lock (_cache_lock) only guards the dictionary itself.

Cache Eviction Strategy:
------------------------
1. **TTL-based**: Carts not touched within CART_SESSION_TTL_SECONDS are
   dropped. Checked probabilistically (~1% of requests).

2. **LRU-based**: When the cache reaches CART_MAX_CACHE_SIZE, the oldest 10%
   of carts (by last access) are evicted.

Usage:
------
    from kitchen_shop.services.cart_sessions import cart_session

    with cart_session(session_id) as cart:
        state = cart.add_item(item)

For multi-worker deployments the cache is per process; sticky sessions or a
shared store would be needed to keep a visitor's cart across workers.
"""

import logging
import random
import threading
import time
from contextlib import contextmanager
from typing import Any, Dict, Iterator, Optional

from ..config import CART_MAX_CACHE_SIZE, CART_SESSION_TTL_SECONDS
from .cart import CartStore

logger = logging.getLogger(__name__)


# =============================================================================
# Cart Cache
# =============================================================================
# {session_id: {"cart": CartStore, "lock": threading.Lock, "last_access": timestamp}}

CART_CACHE: Dict[str, Dict[str, Any]] = {}
_cache_lock = threading.Lock()


# =============================================================================
# Cache Maintenance Functions
# =============================================================================

def _cleanup_expired_carts() -> int:
    """
    Remove carts that haven't been accessed within CART_SESSION_TTL_SECONDS.

    Returns:
        int: Number of carts removed from cache
    """
    now = time.time()

    with _cache_lock:
        expired = [
            sid for sid, entry in CART_CACHE.items()
            if now - entry.get("last_access", 0) > CART_SESSION_TTL_SECONDS
        ]
        for sid in expired:
            del CART_CACHE[sid]

    if expired:
        logger.debug("Cleaned up %d expired carts from cache", len(expired))

    return len(expired)


def _evict_oldest_carts_locked(count: int) -> None:
    """
    Evict the least recently used carts. Caller must hold _cache_lock.

    Args:
        count: Number of carts to evict
    """
    sorted_carts = sorted(
        CART_CACHE.items(),
        key=lambda x: x[1].get("last_access", 0)
    )
    for sid, _ in sorted_carts[:count]:
        del CART_CACHE[sid]

    logger.debug("Evicted %d oldest carts from cache", min(count, len(sorted_carts)))


def _get_or_create_entry(session_id: str) -> Dict[str, Any]:
    if random.randint(1, 100) == 1:
        _cleanup_expired_carts()

    with _cache_lock:
        entry = CART_CACHE.get(session_id)
        if entry is None:
            if len(CART_CACHE) >= CART_MAX_CACHE_SIZE:
                _evict_oldest_carts_locked(max(1, CART_MAX_CACHE_SIZE // 10))

            entry = {
                "cart": CartStore(),
                "lock": threading.Lock(),
                "last_access": time.time(),
            }
            CART_CACHE[session_id] = entry
            logger.debug("Created cart for new session")
        else:
            entry["last_access"] = time.time()
        return entry


# =============================================================================
# Public Cart Session Functions
# =============================================================================

def get_or_create_cart(session_id: str) -> CartStore:
    """
    Get the cart for a session, creating an empty one if needed.

    Reads are fine without the session lock; mutations should use
    cart_session() instead.
    """
    return _get_or_create_entry(session_id)["cart"]


@contextmanager
def cart_session(session_id: str) -> Iterator[CartStore]:
    """
    Context manager that yields a session's cart with exclusive access.

    The session lock is held until the block exits, making each
    mutation + recompute atomic with respect to other requests.
    """
    entry = _get_or_create_entry(session_id)
    with entry["lock"]:
        yield entry["cart"]
        entry["last_access"] = time.time()


def discard_cart(session_id: str) -> bool:
    """
    Drop a session's cart entirely (e.g. after successful checkout).

    Returns:
        True if a cart existed
    """
    with _cache_lock:
        return CART_CACHE.pop(session_id, None) is not None


def peek_cart(session_id: str) -> Optional[CartStore]:
    """Return the cart if the session has one, without creating it."""
    with _cache_lock:
        entry = CART_CACHE.get(session_id)
        return entry["cart"] if entry else None


def clear_cache() -> int:
    """
    Clear all carts from memory.

    Returns:
        int: Number of carts that were in cache before clearing
    """
    with _cache_lock:
        count = len(CART_CACHE)
        CART_CACHE.clear()
        logger.info("Cleared %d carts from cache", count)
        return count


def get_cache_stats() -> Dict[str, Any]:
    """
    Get statistics about the cart cache.

    Returns:
        Dict with size, max_size, ttl_seconds, oldest_access, newest_access
    """
    with _cache_lock:
        if not CART_CACHE:
            return {
                "size": 0,
                "max_size": CART_MAX_CACHE_SIZE,
                "ttl_seconds": CART_SESSION_TTL_SECONDS,
                "oldest_access": None,
                "newest_access": None,
            }

        access_times = [entry["last_access"] for entry in CART_CACHE.values()]
        return {
            "size": len(CART_CACHE),
            "max_size": CART_MAX_CACHE_SIZE,
            "ttl_seconds": CART_SESSION_TTL_SECONDS,
            "oldest_access": min(access_times),
            "newest_access": max(access_times),
        }
