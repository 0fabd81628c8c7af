import logging.config
import sys


def build_logging_config(level: str = "INFO") -> dict:
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "console": {
                "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
                "datefmt": "%Y-%m-%d %H:%M:%S",
            },
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "console",
                "stream": sys.stdout,
            },
        },
        "loggers": {
            # records propagate to the root console handler
            "subsync": {
                "level": level.upper(),
            },
        },
        "root": {
            "handlers": ["console"],
            "level": "WARNING",
        },
    }


def configure_logging(level: str = "INFO") -> None:
    """Configure logging for the service (idempotent, safe to call per app)."""
    logging.config.dictConfig(build_logging_config(level))
