"""
Logging setup.

Console output always; with ``log_dir`` configured, two rotating files are
added next to it:

* ``combined.log`` -- INFO and above
* ``error.log``    -- ERROR and above
"""

import logging.config
import os

from src.config import Settings

LOG_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def configure_logging(settings: Settings) -> None:
    handlers: dict[str, dict] = {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "default",
        },
    }
    if settings.log_dir:
        os.makedirs(settings.log_dir, exist_ok=True)
        for name, level in (("combined", "INFO"), ("error", "ERROR")):
            handlers[name] = {
                "class": "logging.handlers.RotatingFileHandler",
                "filename": os.path.join(settings.log_dir, f"{name}.log"),
                "maxBytes": 10 * 1024 * 1024,
                "backupCount": 5,
                "encoding": "utf-8",
                "level": level,
                "formatter": "default",
            }

    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "default": {"format": LOG_FORMAT, "datefmt": DATE_FORMAT},
            },
            "handlers": handlers,
            "loggers": {
                "src": {
                    "level": settings.log_level.upper(),
                    "handlers": list(handlers),
                    "propagate": False,
                },
            },
            "root": {"level": "WARNING", "handlers": ["console"]},
        }
    )
