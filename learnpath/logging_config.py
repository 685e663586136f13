# logging_config.py
import logging
import logging.config
from pathlib import Path
from typing import Any, Dict, Optional

LOG_FORMAT = '%(asctime)s [%(levelname)s] %(name)s: %(message)s'
FILE_LOG_FORMAT = '%(asctime)s [%(levelname)s] %(name)s:%(lineno)d: %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'

# third-party loggers that keep their own level regardless of the app level
LIBRARY_LEVELS = {
    'uvicorn': 'INFO',
    'apscheduler': 'WARNING',
}


def build_logging_config(log_level: str = "INFO", log_file: Optional[str] = None) -> Dict[str, Any]:
    handlers: Dict[str, Any] = {
        'console': {
            'level': log_level,
            'class': 'logging.StreamHandler',
            'formatter': 'console',
            'stream': 'ext://sys.stdout'
        }
    }
    if log_file:
        handlers['file'] = {
            'level': log_level,
            'class': 'logging.handlers.RotatingFileHandler',
            'formatter': 'file',
            'filename': log_file,
            'maxBytes': 10485760,  # 10MB
            'backupCount': 5
        }
    names = list(handlers)

    loggers: Dict[str, Any] = {'': {'handlers': names, 'level': log_level, 'propagate': False}}
    for name, level in LIBRARY_LEVELS.items():
        loggers[name] = {'handlers': names, 'level': level, 'propagate': False}

    return {
        'version': 1,
        'disable_existing_loggers': False,
        'formatters': {
            'console': {'format': LOG_FORMAT, 'datefmt': DATE_FORMAT},
            'file': {'format': FILE_LOG_FORMAT, 'datefmt': DATE_FORMAT},
        },
        'handlers': handlers,
        'loggers': loggers,
    }


def setup_logging(log_level: str = "INFO", log_file: Optional[str] = None) -> None:
    """
    Configure logging for the API, the scheduler and the diagnostics CLI.

    Args:
        log_level: Level for application loggers (DEBUG, INFO, WARNING, ...)
        log_file: Optional rotating log file path
    """
    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)

    logging.config.dictConfig(build_logging_config(log_level, log_file))

    logger = logging.getLogger(__name__)
    logger.info(f"Logging configured with level: {log_level}")
    if log_file:
        logger.info(f"Log file: {log_file}")
