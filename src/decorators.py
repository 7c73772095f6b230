import logging
import time
from functools import wraps
from typing import Callable

from src.relational_db.errors import DBError

logger = logging.getLogger(__name__)

ERROR_PREFIX = "[ERROR]"


def handle_db_errors(func: Callable[..., str]) -> Callable[..., str]:
    """
    Command boundary: turns a DBError raised anywhere below into the
    client-facing error response instead of letting it escape.
    """
    @wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except DBError as e:
            logger.warning("%s failed: %s", func.__name__, e)
            return f"{ERROR_PREFIX}: {e}"
    return wrapper


def log_time(func: Callable) -> Callable:
    """
    Logs how long the wrapped call took (DEBUG).
    """
    @wraps(func)
    def wrapper(*args, **kwargs):
        start = time.monotonic()
        try:
            return func(*args, **kwargs)
        finally:
            dt = time.monotonic() - start
            logger.debug("%s took %.3f s", func.__name__, dt)
    return wrapper
