import logging
import sys
import threading
from pathlib import Path
from typing import TypeAlias

from loguru import logger

from multitemp.core.settings import settings

_LoggingConfig: TypeAlias = tuple[str | None, bool]

_LOGGING_LOCK = threading.Condition()
_LOGGING_REFCOUNT = 0
_LOGGING_INITIALIZING = False
_LOGGING_SHUTTING_DOWN = False
_LOGGING_CONFIG: _LoggingConfig | None = None


class InterceptHandler(logging.Handler):
    def emit(self, record: logging.LogRecord):
        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        frame, depth = logging.currentframe(), 2
        while frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(
            level, record.getMessage()
        )


def _install_sinks(log_dir: str | None, debug: bool) -> None:
    logger.remove()

    console_level = "DEBUG" if debug else "INFO"

    logger.configure(extra={"app": settings.app_name})

    logger.add(
        sys.stderr,
        level=console_level,
        colorize=True,
        format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan>:<cyan>{function}</cyan> - <level>{message}</level>"
    )

    if log_dir is not None:
        log_file_path = Path(log_dir) / "multitemp_{time}.log"

        logger.add(
            log_file_path,
            level="DEBUG",
            format="{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | {name}:{function}:{line} | {message} | {extra}",
            rotation="00:00",
            retention="7 days",
            compression="zip",
            enqueue=True,
            backtrace=True,
            diagnose=True,
        )

    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)
    logger.debug("Here logger stands.")


def setup_logging(
    log_dir: str | Path | None = settings.LOG_DIR,
    debug: bool = settings.DEBUG_MODE,
) -> None:
    """Install the console/file sinks once; nested calls only bump a refcount."""
    global _LOGGING_REFCOUNT, _LOGGING_INITIALIZING, _LOGGING_CONFIG

    config: _LoggingConfig = (
        str(log_dir) if log_dir is not None else None,
        debug,
    )
    with _LOGGING_LOCK:
        while _LOGGING_INITIALIZING or _LOGGING_SHUTTING_DOWN:
            _LOGGING_LOCK.wait()
        if _LOGGING_REFCOUNT > 0:
            _LOGGING_REFCOUNT += 1
            if _LOGGING_CONFIG != config:
                logger.warning(
                    "[LOG] Logging already configured; keeping existing sinks",
                    active=_LOGGING_CONFIG,
                    requested=config,
                )
            return
        _LOGGING_INITIALIZING = True

    try:
        _install_sinks(config[0], debug)
    except BaseException:
        with _LOGGING_LOCK:
            _LOGGING_INITIALIZING = False
            _LOGGING_LOCK.notify_all()
        raise

    with _LOGGING_LOCK:
        _LOGGING_REFCOUNT = 1
        _LOGGING_CONFIG = config
        _LOGGING_INITIALIZING = False
        _LOGGING_LOCK.notify_all()


def shutdown_logging() -> None:
    global _LOGGING_REFCOUNT, _LOGGING_SHUTTING_DOWN, _LOGGING_CONFIG

    with _LOGGING_LOCK:
        while _LOGGING_INITIALIZING or _LOGGING_SHUTTING_DOWN:
            _LOGGING_LOCK.wait()
        if _LOGGING_REFCOUNT <= 0:
            return
        _LOGGING_REFCOUNT -= 1
        if _LOGGING_REFCOUNT > 0:
            return
        _LOGGING_SHUTTING_DOWN = True

    try:
        logger.debug("Flushing all log messages before shutdown...")
        # Blocks until enqueued messages are handled; the awaitable is unused.
        logger.complete()
        logger.remove()
    finally:
        with _LOGGING_LOCK:
            _LOGGING_CONFIG = None
            _LOGGING_SHUTTING_DOWN = False
            _LOGGING_LOCK.notify_all()
