"""
Thread-safe rate-limited logging.

Leash checks run once per call, so a client that keeps choosing a wide block
range would otherwise emit the same warning on every request.
"""
import logging
import threading
from typing import Dict, Optional

from cachetools import TTLCache

logger = logging.getLogger(__name__)

# One cache per interval, each holding at most 100 recent messages
_log_caches: Dict[int, TTLCache] = {}
_log_cache_lock = threading.RLock()


def rate_limited_log(
    message: str,
    level: str = "warning",
    interval: int = 60,
    logger_instance: Optional[logging.Logger] = None
) -> bool:
    """
    Log a message at most once per ``interval`` seconds.

    Args:
        message: Message to log
        level: Log level name (debug, info, warning, error, critical)
        interval: Minimum number of seconds between identical messages
        logger_instance: Logger to use (defaults to this module's logger)

    Returns:
        True if the message was emitted, False if it was suppressed
    """
    log_instance = logger_instance or logger
    log_method = getattr(log_instance, level.lower(), log_instance.warning)
    key = f"{level}:{message}"

    with _log_cache_lock:
        cache = _log_caches.get(interval)
        if cache is None:
            cache = _log_caches[interval] = TTLCache(maxsize=100, ttl=interval)
        if key in cache:
            return False
        log_method(message)
        cache[key] = True
        return True


def reset_rate_limited_log() -> None:
    """Forget every suppressed message."""
    with _log_cache_lock:
        _log_caches.clear()
