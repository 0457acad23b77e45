import functools
import gzip
import inspect
import logging
import logging.handlers
import os
import shutil
import sys
from pathlib import Path
from typing import Callable, ParamSpec, TypeVar

from .config import settings

logger = logging.getLogger("player_tracker")
logger.setLevel(logging.DEBUG)
formatter = logging.Formatter(
    "%(asctime)s %(levelname)s [%(module)s:%(funcName)s:%(lineno)d] %(message)s"
)

logs_dir = Path(settings.logs_dir)
logs_dir.mkdir(parents=True, exist_ok=True)


def rotator(source: str, dest: str) -> None:
    """Compress a rotated log file next to its destination name."""
    with open(source, "rb") as f_in, gzip.open(dest + ".gz", "wb") as f_out:
        shutil.copyfileobj(f_in, f_out)
    os.remove(source)


log_file_handler = logging.handlers.TimedRotatingFileHandler(
    logs_dir / "player_tracker.log", when="midnight"
)
log_file_handler.setFormatter(formatter)
log_file_handler.rotator = rotator
logger.addHandler(log_file_handler)

log_stream_handler = logging.StreamHandler(sys.stdout)
log_stream_handler.setFormatter(formatter)
logger.addHandler(log_stream_handler)


def _render_prefix(prefix: str, func: Callable, args: tuple, kwargs: dict) -> str:
    if not prefix:
        return ""
    if "{" not in prefix:
        return f"{prefix}: "
    try:
        bound = inspect.signature(func).bind(*args, **kwargs)
        bound.apply_defaults()
        return f"{prefix.format_map(bound.arguments)}: "
    except (TypeError, KeyError, ValueError):
        return f"{prefix}: "


P = ParamSpec("P")
R = TypeVar("R")


def log_exception(
    prefix: str = "",
    default_return: R | None = None,
) -> Callable[[Callable[P, R]], Callable[P, R]]:
    """
    Decorator that logs any exception raised by the wrapped callable and
    returns ``default_return`` instead of propagating it.

    Meant for background work (scheduler ticks, startup hooks) where one
    failure must not stop the surrounding loop. Works on sync and async
    functions. ``prefix`` may reference the call's arguments by name,
    e.g. ``"Probe of {address} failed"``.
    """

    def decorator(func: Callable[P, R]) -> Callable[P, R]:
        def report(exc: Exception, args: tuple, kwargs: dict) -> None:
            logger.error(
                f"{_render_prefix(prefix, func, args, kwargs)}"
                f"{type(exc).__name__}: {exc}",
                exc_info=True,
                stacklevel=3,
            )

        if inspect.iscoroutinefunction(func):

            @functools.wraps(func)
            async def async_wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
                try:
                    return await func(*args, **kwargs)
                except Exception as e:
                    report(e, args, kwargs)
                    return default_return  # type: ignore[return-value]

            return async_wrapper  # type: ignore[return-value]

        @functools.wraps(func)
        def sync_wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
            try:
                return func(*args, **kwargs)
            except Exception as e:
                report(e, args, kwargs)
                return default_return  # type: ignore[return-value]

        return sync_wrapper

    return decorator
