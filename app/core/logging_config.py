import logging
import logging.config
import os
from datetime import datetime
from typing import Any, Dict
from app.core.config import settings

LOG_CATEGORIES = ("app", "error", "access", "audit")
MAX_LOG_BYTES = 10 * 1024 * 1024


def _rotating_handler(log_dir: str, category: str, level: str, formatter: str) -> Dict[str, Any]:
    """Daily-named, size-rotated file under <LOG_DIR>/<category>/"""
    current_date = datetime.now().strftime("%Y-%m-%d")
    return {
        "class": "logging.handlers.RotatingFileHandler",
        "level": level,
        "formatter": formatter,
        "filename": os.path.join(log_dir, category, f"{category}-{current_date}.log"),
        "maxBytes": MAX_LOG_BYTES,
        "backupCount": 10,
        "encoding": "utf-8",
    }


def build_logging_config(log_dir: str, level: str) -> Dict[str, Any]:
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "default": {
                "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
                "datefmt": "%Y-%m-%d %H:%M:%S",
            },
            "detailed": {
                "format": "%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s",
                "datefmt": "%Y-%m-%d %H:%M:%S",
            },
            "short": {
                "format": "%(asctime)s - %(message)s",
                "datefmt": "%Y-%m-%d %H:%M:%S",
            },
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "level": level,
                "formatter": "default",
                "stream": "ext://sys.stdout",
            },
            "app_file": _rotating_handler(log_dir, "app", level, "detailed"),
            "error_file": _rotating_handler(log_dir, "error", "ERROR", "detailed"),
            "access_file": _rotating_handler(log_dir, "access", "INFO", "short"),
            "audit_file": _rotating_handler(log_dir, "audit", "INFO", "short"),
        },
        "loggers": {
            "": {
                "level": level,
                "handlers": ["console", "app_file", "error_file"],
            },
            "access": {
                "level": "INFO",
                "handlers": ["access_file"],
                "propagate": False,
            },
            "uvicorn.access": {
                "level": "INFO",
                "handlers": ["access_file"],
                "propagate": False,
            },
            # User actions also reach the app log through the root logger
            "audit": {
                "level": "INFO",
                "handlers": ["audit_file"],
                "propagate": True,
            },
            "sqlalchemy.engine": {
                "level": "INFO" if settings.DEBUG else "WARNING",
                "handlers": ["app_file"],
                "propagate": False,
            },
        },
    }


def setup_logging():
    """Create the log folders and apply the logging configuration"""
    log_dir = settings.LOG_DIR
    for category in LOG_CATEGORIES:
        os.makedirs(os.path.join(log_dir, category), exist_ok=True)

    logging.config.dictConfig(build_logging_config(log_dir, settings.LOG_LEVEL.upper()))

    logger = logging.getLogger(__name__)
    logger.info(f"Logging configured: level={settings.LOG_LEVEL}, directory=./{log_dir}/")
