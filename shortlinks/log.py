"""
Logging setup and request tracing.
"""

import logging
import time

from fastapi import Request

LOG_FORMAT = "%(asctime)s  %(levelname)-8s  %(name)s  %(message)s"

# Level names uvicorn accepts for its own loggers
UVICORN_LEVELS = ("critical", "error", "warning", "info", "debug")

logger = logging.getLogger("shortlinks.http")


def resolve_log_level(level: str) -> int:
    """Map a LOG_LEVEL string to a logging level. Unknown names give INFO."""
    resolved = logging.getLevelName(level.strip().upper())
    return resolved if isinstance(resolved, int) else logging.INFO


def uvicorn_log_level(level: str) -> str:
    """LOG_LEVEL as a name uvicorn understands ("warn" -> "warning")."""
    name = logging.getLevelName(resolve_log_level(level)).lower()
    return name if name in UVICORN_LEVELS else "info"


def configure_logging(level: str = "info") -> int:
    """Configure root logging and return the level used."""
    resolved = resolve_log_level(level)
    logging.basicConfig(level=resolved, format=LOG_FORMAT)
    if not isinstance(logging.getLevelName(level.strip().upper()), int):
        logging.getLogger(__name__).warning("Unknown LOG_LEVEL %r, using INFO", level)
    return resolved


async def trace_requests(request: Request, call_next):
    """HTTP middleware: one log line per request."""
    started = time.perf_counter()
    try:
        response = await call_next(request)
    except Exception:
        elapsed_ms = (time.perf_counter() - started) * 1000
        logger.exception("%s %s failed (%.1f ms)", request.method, request.url.path, elapsed_ms)
        raise

    elapsed_ms = (time.perf_counter() - started) * 1000
    logger.info(
        "%s %s -> %d (%.1f ms)",
        request.method,
        request.url.path,
        response.status_code,
        elapsed_ms,
    )
    return response
