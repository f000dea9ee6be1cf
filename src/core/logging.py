import sys
import os
from typing import Any, Optional
from loguru import logger


def setup_logging(debug_mode: bool = True, log_dir: Optional[str] = "logs"):
    """
    Configures Loguru logger.

    Args:
        debug_mode: DEBUG level on the console when True, INFO otherwise
        log_dir: Directory for rotating log files (None disables the file sink)
    """
    # Remove default handler
    logger.remove()

    # Console Handler
    level = "DEBUG" if debug_mode else "INFO"
    logger.add(sys.stderr, level=level, format="<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>")

    # File Handler
    if log_dir:
        if not os.path.exists(log_dir):
            os.makedirs(log_dir)

        logger.add(os.path.join(log_dir, "plugin_host_{time}.log"), rotation="10 MB", retention="1 week", level="DEBUG")

    logger.info("Logging initialized.")


class NamespaceLogger:
    """
    Logger adapter that prefixes every message with a namespace.

    Usage:
        log = NamespaceLogger("myadapter.0 Plugin sentry")
        log.info("started")   # -> "myadapter.0 Plugin sentry started"
    """

    # loguru has no "silly" level, trace is the closest match
    _LEVELS = {
        "silly": "trace",
        "debug": "debug",
        "info": "info",
        "warn": "warning",
        "warning": "warning",
        "error": "error",
    }
    # Level names tried on other backing loggers when the requested one is missing
    _ALIASES = {"silly": "trace", "warn": "warning", "warning": "warn"}

    def __init__(self, namespace: str, log: Optional[Any] = None):
        """
        Args:
            namespace: Prefix put in front of each message
            log: Backing logger (defaults to the loguru logger)
        """
        self.namespace = namespace
        self.logger = log if log is not None else logger

    def _emit(self, level: str, msg: Any) -> None:
        target = self.logger
        if target is logger:
            # Report the caller of silly()/debug()/... as the source location
            method = getattr(logger.opt(depth=2), self._LEVELS[level])
        else:
            method = getattr(target, level, None) or getattr(target, self._ALIASES.get(level, level))
        method(f"{self.namespace} {msg}")

    def silly(self, msg: Any) -> None:
        self._emit("silly", msg)

    def debug(self, msg: Any) -> None:
        self._emit("debug", msg)

    def info(self, msg: Any) -> None:
        self._emit("info", msg)

    def warn(self, msg: Any) -> None:
        self._emit("warn", msg)

    def warning(self, msg: Any) -> None:
        self._emit("warning", msg)

    def error(self, msg: Any) -> None:
        self._emit("error", msg)

    def child(self, suffix: str) -> "NamespaceLogger":
        """Return a logger whose namespace extends this one."""
        return NamespaceLogger(f"{self.namespace} {suffix}", self.logger)

    def __repr__(self) -> str:
        return f"NamespaceLogger({self.namespace!r})"
