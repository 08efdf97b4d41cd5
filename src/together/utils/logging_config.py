"""
Centralized logging configuration for the together harness.
Provides component-specific loggers under the ``together`` namespace.

As a library the harness stays silent by default; call
:func:`initialize_logging` (or set ``TOGETHER_DEBUG=1`` with the pytest
plugin) to see what the executor does.
"""

import logging
import logging.handlers
import sys
from pathlib import Path
from typing import Dict, Optional

ROOT_LOGGER = "together"

logging.getLogger(ROOT_LOGGER).addHandler(logging.NullHandler())


class ComponentLogger:
    """Manages component-specific loggers and their optional handlers."""

    _loggers: Dict[str, logging.Logger] = {}
    _handlers: list = []
    _initialized = False
    _log_dir: Optional[Path] = None

    # Component definitions with their log levels
    COMPONENTS = {
        'core': {'level': logging.INFO},
        'pool': {'level': logging.INFO},
        'gate': {'level': logging.INFO},
        'plugin': {'level': logging.INFO},
        'config': {'level': logging.INFO},
    }

    @classmethod
    def initialize(cls, log_dir: Optional[str] = None, debug: bool = False) -> None:
        """
        Attach handlers to the harness loggers.

        Args:
            log_dir: Directory for a rotating ``together.log`` file. No file
                     is written when omitted.
            debug: Enable debug logging for all components
        """
        if cls._initialized:
            return

        detailed_formatter = logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - [%(threadName)s] - %(funcName)s() - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )
        simple_formatter = logging.Formatter(
            '%(asctime)s - %(levelname)s - [%(threadName)s] %(message)s',
            datefmt='%H:%M:%S'
        )

        root = logging.getLogger(ROOT_LOGGER)
        root.setLevel(logging.DEBUG if debug else logging.INFO)

        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(logging.DEBUG if debug else logging.WARNING)
        console_handler.setFormatter(simple_formatter)
        root.addHandler(console_handler)
        cls._handlers.append(console_handler)

        if log_dir:
            cls._log_dir = Path(log_dir)
            cls._log_dir.mkdir(parents=True, exist_ok=True)
            file_handler = logging.handlers.RotatingFileHandler(
                cls._log_dir / 'together.log',
                maxBytes=10 * 1024 * 1024,  # 10MB
                backupCount=5,
                encoding='utf-8'
            )
            file_handler.setLevel(logging.DEBUG if debug else logging.INFO)
            file_handler.setFormatter(detailed_formatter)
            root.addHandler(file_handler)
            cls._handlers.append(file_handler)

        for component_name, component_config in cls.COMPONENTS.items():
            logger = cls.get_logger(component_name)
            logger.setLevel(logging.DEBUG if debug else component_config['level'])

        cls._initialized = True
        root.debug(f"Logging initialized (debug={debug}, log_dir={cls._log_dir})")

    @classmethod
    def reset(cls) -> None:
        """Detach the handlers added by :meth:`initialize`."""
        root = logging.getLogger(ROOT_LOGGER)
        for handler in cls._handlers:
            root.removeHandler(handler)
            handler.close()
        cls._handlers = []
        root.setLevel(logging.NOTSET)
        for logger in cls._loggers.values():
            logger.setLevel(logging.NOTSET)
        cls._log_dir = None
        cls._initialized = False

    @classmethod
    def get_logger(cls, component: str) -> logging.Logger:
        """
        Get a logger for a specific component.

        Args:
            component: Component name (core, pool, gate, plugin) or a module
                       path like 'together.pool'

        Returns:
            Logger instance for the component
        """
        if component.startswith(ROOT_LOGGER + '.'):
            component = component.split('.')[-1]
        if component not in cls._loggers:
            cls._loggers[component] = logging.getLogger(f"{ROOT_LOGGER}.{component}")
        return cls._loggers[component]

    @classmethod
    def get_log_directory(cls) -> Optional[Path]:
        """Get the current log directory path."""
        return cls._log_dir


# Convenience functions
def get_logger(component: str) -> logging.Logger:
    """Get a logger for a specific component."""
    return ComponentLogger.get_logger(component)


def initialize_logging(log_dir: Optional[str] = None, debug: bool = False) -> None:
    """Initialize the logging system."""
    ComponentLogger.initialize(log_dir=log_dir, debug=debug)


def get_log_directory() -> Optional[Path]:
    """Get the current log directory path."""
    return ComponentLogger.get_log_directory()
