"""
Centralized logging configuration for pcaphandler.
"""

import logging
import logging.config
from typing import Optional

from .config import config


def setup_logging(log_level: Optional[str] = None, log_file: Optional[str] = None) -> None:
    """
    Set up logging for pcaphandler.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL),
            defaults to the configured level
        log_file: Optional file that receives DEBUG and above
    """
    log_level = (log_level or config.LOG_LEVEL).upper()

    handlers = {
        'console': {
            'level': log_level,
            'class': 'logging.StreamHandler',
            'formatter': 'standard',
            'stream': 'ext://sys.stderr'
        }
    }
    if log_file:
        handlers['file'] = {
            'level': 'DEBUG',
            'class': 'logging.FileHandler',
            'formatter': 'detailed',
            'filename': str(log_file),
            'mode': 'a'
        }

    logging_config = {
        'version': 1,
        'disable_existing_loggers': False,
        'formatters': {
            'standard': {
                'format': '%(asctime)s [%(levelname)s] %(name)s: %(message)s',
                'datefmt': '%Y-%m-%d %H:%M:%S'
            },
            'detailed': {
                'format': '%(asctime)s [%(levelname)s] %(name)s:%(lineno)d: %(message)s',
                'datefmt': '%Y-%m-%d %H:%M:%S'
            }
        },
        'handlers': handlers,
        'loggers': {
            'pcaphandler': {
                'handlers': list(handlers),
                'level': 'DEBUG' if log_file else log_level,
                'propagate': False
            }
        }
    }

    logging.config.dictConfig(logging_config)


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger under the pcaphandler namespace.

    Args:
        name: Name of the module (usually __name__)
    """
    if name == "pcaphandler" or name.startswith("pcaphandler."):
        return logging.getLogger(name)
    return logging.getLogger(f"pcaphandler.{name}")
