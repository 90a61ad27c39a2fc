# utils/logger.py
from __future__ import annotations
import logging
from logging.handlers import RotatingFileHandler
import os, functools, time
from pathlib import Path

_DEFAULT_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
_MAX_BYTES = int(os.getenv("LOG_MAX_BYTES", "1048576"))
_BACKUP_COUNT = int(os.getenv("LOG_BACKUP_COUNT", "3"))
_LOG_TO_FILE = os.getenv("LOG_TO_FILE", "false").lower() == "true"

_CONSOLE_FMT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
_FILE_FMT = "%(asctime)s | %(levelname)s | %(message)s"
_DATE_FMT = "%Y-%m-%d %H:%M:%S"


class _LoggerManager:
    """
    Configures the root console handler once and, when ``LOG_TO_FILE`` is
    enabled, one rotating file per module under ``LOG_DIR``.
    """

    def __init__(self) -> None:
        self._configured = False
        self._file_handlers: dict[str, logging.Handler] = {}
        self._log_dir = os.getenv("LOG_DIR", "./logs")
        self._level = getattr(logging, _DEFAULT_LEVEL, logging.INFO)

    def _ensure(self) -> None:
        if self._configured:
            return

        root = logging.getLogger()
        root.setLevel(self._level)
        if not any(isinstance(h, logging.StreamHandler) for h in root.handlers):
            sh = logging.StreamHandler()
            sh.setLevel(self._level)
            sh.setFormatter(logging.Formatter(fmt=_CONSOLE_FMT, datefmt=_DATE_FMT))
            root.addHandler(sh)

        if _LOG_TO_FILE:
            Path(self._log_dir).mkdir(parents=True, exist_ok=True)
        self._configured = True

    def _attach_file(self, name: str, logger: logging.Logger) -> None:
        safe_name = name.replace(".", "_").replace("/", "_")
        file_path = os.path.join(self._log_dir, f"{safe_name}.log")
        try:
            fh = RotatingFileHandler(file_path, maxBytes=_MAX_BYTES, backupCount=_BACKUP_COUNT, encoding="utf-8")
        except OSError as e:
            logger.warning(f"File logging disabled for {name}: {e}")
            return
        fh.setLevel(self._level)
        fh.setFormatter(logging.Formatter(fmt=_FILE_FMT, datefmt=_DATE_FMT))
        self._file_handlers[name] = fh
        logger.addHandler(fh)
        logger.propagate = True  # keep console output

    def setup_logger(self, name: str) -> logging.Logger:
        self._ensure()
        logger = logging.getLogger(name)
        if _LOG_TO_FILE and name not in self._file_handlers:
            self._attach_file(name, logger)
        return logger


logger_manager = _LoggerManager()


def log_function(func):
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        logger = logger_manager.setup_logger(func.__module__)
        logger.debug(f"→ {func.__qualname__} args={args} kwargs={kwargs}")
        t0 = time.time()
        try:
            result = func(*args, **kwargs)
            logger.debug(f"← {func.__qualname__} ({(time.time()-t0)*1000:.1f} ms)")
            return result
        except Exception as e:
            logger.debug(f"✗ {func.__qualname__}: {e!r}")
            raise
    return wrapper
