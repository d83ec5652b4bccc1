"""
Logging for PlayGate.

Modules log through ``get_logger(__name__)``. The root logger's handlers are
owned by a single ``LoggingManager``. It is set up once per process from a
named preset (``auto_configure``, driven by ``--env`` or ``PLAYGATE_ENV``)
or from an explicit ``LogConfig``:

    from PlayGate.core.logging import LogConfig, configure_logging, get_logger

    configure_logging(LogConfig(level="DEBUG", file_output=False))
    get_logger(__name__).info("Handshake started")

The CLI adjusts the level afterwards with ``--log-level`` and releases the
handlers on exit through ``get_logging_manager().shutdown()``.
"""

import json
import logging
import logging.handlers
import os
import sys
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Callable, Dict, List, Optional, Union

LOG_FILE = "playgate.log"
ERROR_LOG_FILE = "playgate_errors.log"

SHORT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
THREAD_FORMAT = (
    "%(asctime)s - %(name)s - %(levelname)s - "
    "[%(threadName)s %(filename)s:%(lineno)d] - %(message)s"
)


@dataclass
class LogConfig:
    """
    How the root logger is set up.

    Attributes:
        level: Root level name, e.g. "INFO"
        log_dir: Where the rotating log files go
        console_output: Log to stdout
        file_output: Log to ``playgate.log`` plus an errors-only file
        json_output: Write the files as JSON lines
        max_bytes: Rotate a file once it reaches this size
        backup_count: Rotated files kept per log
        format_string: Text format; defaults differ for console and files
        date_format: ``asctime`` format
        component_levels: Per-logger level overrides, e.g. {"aiohttp": "WARNING"}
    """
    level: str = "INFO"
    log_dir: str = "./logs"
    console_output: bool = True
    file_output: bool = True
    json_output: bool = False
    max_bytes: int = 10 * 1024 * 1024
    backup_count: int = 5
    format_string: Optional[str] = None
    date_format: str = "%Y-%m-%d %H:%M:%S"
    component_levels: Dict[str, str] = field(default_factory=dict)


def to_level(level: Union[str, int]) -> int:
    """Turn "debug"/"INFO"/logging.WARNING into a numeric level."""
    if isinstance(level, int):
        return level
    value = logging.getLevelName(level.upper())
    if not isinstance(value, int):
        raise ValueError(f"Unknown log level: {level}")
    return value


class ColoredFormatter(logging.Formatter):
    """Console formatter that colors the level name on ANSI terminals."""

    COLORS = {
        'DEBUG': '\033[36m',
        'INFO': '\033[32m',
        'WARNING': '\033[33m',
        'ERROR': '\033[31m',
        'CRITICAL': '\033[35m',
    }
    RESET = '\033[0m'

    def __init__(self, fmt: str, datefmt: Optional[str] = None, use_colors: bool = True):
        super().__init__(fmt, datefmt)
        self.use_colors = use_colors and sys.platform != 'win32'

    def format(self, record: logging.LogRecord) -> str:
        color = self.COLORS.get(record.levelname) if self.use_colors else None
        if color is None:
            return super().format(record)

        # Other handlers share the record and must see the plain level name
        tinted = logging.makeLogRecord(record.__dict__)
        tinted.levelname = f"{color}{record.levelname}{self.RESET}"
        return super().format(tinted)


class JsonFormatter(logging.Formatter):
    """One JSON object per record, for log shippers."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            'timestamp': datetime.fromtimestamp(record.created).isoformat(),
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
            'thread': record.threadName,
            'location': f"{record.module}.{record.funcName}:{record.lineno}",
        }
        if record.exc_info:
            entry['exception'] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


class LoggingManager:
    """
    Process-wide owner of the handlers PlayGate puts on the root logger.

    Only handlers installed here are ever removed, so handlers added by
    pytest or an embedding application survive reconfiguration.
    """

    _instance: Optional['LoggingManager'] = None

    def __new__(cls):
        if cls._instance is None:
            instance = super().__new__(cls)
            instance._config = None
            instance._handlers = []
            instance._pinned = set()
            cls._instance = instance
        return cls._instance

    @property
    def config(self) -> Optional[LogConfig]:
        """The configuration last applied, or None before the first one."""
        return self._config

    @property
    def handlers(self) -> List[logging.Handler]:
        return list(self._handlers)

    def configure(self, config: LogConfig) -> None:
        """Replace our handlers with the ones ``config`` describes."""
        level = to_level(config.level)
        self._detach_handlers()
        self._config = config
        logging.getLogger().setLevel(level)

        if config.console_output:
            console = logging.StreamHandler(sys.stdout)
            console.setLevel(level)
            console.setFormatter(ColoredFormatter(config.format_string or SHORT_FORMAT, config.date_format))
            self.add_handler(console)

        if config.file_output:
            Path(config.log_dir).mkdir(parents=True, exist_ok=True)
            if config.json_output:
                formatter = JsonFormatter()
            else:
                formatter = logging.Formatter(config.format_string or THREAD_FORMAT, config.date_format)
            self.add_handler(self._rotating_handler(config, LOG_FILE, level, formatter))
            self.add_handler(self._rotating_handler(config, ERROR_LOG_FILE, logging.ERROR, formatter), pinned=True)

        for name, component_level in config.component_levels.items():
            logging.getLogger(name).setLevel(to_level(component_level))

        logging.getLogger(__name__).debug("Logging configured at %s", logging.getLevelName(level))

    @staticmethod
    def _rotating_handler(
        config: LogConfig,
        filename: str,
        level: int,
        formatter: logging.Formatter
    ) -> logging.Handler:
        handler = logging.handlers.RotatingFileHandler(
            os.path.join(config.log_dir, filename),
            maxBytes=config.max_bytes,
            backupCount=config.backup_count,
            encoding='utf-8'
        )
        handler.setLevel(level)
        handler.setFormatter(formatter)
        return handler

    def get_logger(self, name: str) -> logging.Logger:
        return logging.getLogger(name)

    def set_level(self, level: Union[str, int]) -> None:
        """
        Change the root level and that of every handler we own.

        The errors-only file keeps logging at ERROR.

        Raises:
            ValueError: unknown level name
        """
        level = to_level(level)
        logging.getLogger().setLevel(level)
        for handler in self._handlers:
            if handler not in self._pinned:
                handler.setLevel(level)

    def add_handler(self, handler: logging.Handler, pinned: bool = False) -> None:
        """
        Attach ``handler`` to the root logger; it is dropped on the next configure.

        A pinned handler keeps its own level through ``set_level``.
        """
        logging.getLogger().addHandler(handler)
        self._handlers.append(handler)
        if pinned:
            self._pinned.add(handler)

    def shutdown(self) -> None:
        """Flush, close and detach our handlers."""
        self._detach_handlers()

    def _detach_handlers(self) -> None:
        root = logging.getLogger()
        for handler in self._handlers:
            root.removeHandler(handler)
            handler.flush()
            handler.close()
        self._handlers = []
        self._pinned = set()


_logging_manager = LoggingManager()


def get_logger(name: str) -> logging.Logger:
    """Named logger; use ``__name__``."""
    return _logging_manager.get_logger(name)


def configure_logging(config: LogConfig) -> None:
    _logging_manager.configure(config)


def get_logging_manager() -> LoggingManager:
    return _logging_manager


def create_development_config() -> LogConfig:
    """Everything from DEBUG up, on the console and in ./logs/dev."""
    return LogConfig(
        level="DEBUG",
        log_dir="./logs/dev",
        max_bytes=5 * 1024 * 1024,
        backup_count=3,
        format_string=THREAD_FORMAT,
        component_levels={"aiohttp": "WARNING", "uvicorn": "INFO"},
    )


def create_production_config() -> LogConfig:
    """JSON files only, INFO and up."""
    return LogConfig(
        level="INFO",
        log_dir="./logs/prod",
        console_output=False,
        json_output=True,
        max_bytes=50 * 1024 * 1024,
        backup_count=10,
        component_levels={"aiohttp": "ERROR", "uvicorn": "WARNING"},
    )


def create_testing_config() -> LogConfig:
    """Console only, so test runs leave no files behind."""
    return LogConfig(
        level="DEBUG",
        log_dir="./logs/test",
        file_output=False,
        format_string="%(levelname)s - %(name)s - %(message)s",
        component_levels={"aiohttp": "ERROR"},
    )


PRESETS: Dict[str, Callable[[], LogConfig]] = {
    "development": create_development_config,
    "dev": create_development_config,
    "production": create_production_config,
    "prod": create_production_config,
    "testing": create_testing_config,
    "test": create_testing_config,
}


def auto_configure(env: Optional[str] = None) -> str:
    """
    Apply the preset named by ``env``, or by ``PLAYGATE_ENV`` when env is None.

    Unknown names fall back to development.

    Returns:
        The environment name that was applied
    """
    env = (env or os.environ.get("PLAYGATE_ENV") or "development").lower()
    if env not in PRESETS:
        env = "development"
    configure_logging(PRESETS[env]())
    get_logger(__name__).info("Logging configured for %s", env)
    return env


__all__ = [
    'LogConfig',
    'LoggingManager',
    'ColoredFormatter',
    'JsonFormatter',
    'PRESETS',
    'get_logger',
    'configure_logging',
    'get_logging_manager',
    'create_development_config',
    'create_production_config',
    'create_testing_config',
    'auto_configure',
    'to_level',
]
