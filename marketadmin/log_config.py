"""Django LOGGING dict: console output, level from the environment."""

import os

LOG_FORMAT = "%(asctime)s %(levelname)s:%(name)s:%(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
DEFAULT_LOG_LEVEL = "INFO"

APP_LOGGERS = ("core", "businesses", "verifications")


def _clean_env_value(value, default):
    if value is None:
        return default
    return value.strip().strip('"').strip("'") or default


def build_logging(level=None):
    level_name = (level or _clean_env_value(os.getenv("LOG_LEVEL"), DEFAULT_LOG_LEVEL)).upper()
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "standard": {"format": LOG_FORMAT, "datefmt": LOG_DATE_FORMAT},
        },
        "handlers": {
            "console": {"class": "logging.StreamHandler", "formatter": "standard"},
        },
        "root": {"handlers": ["console"], "level": "WARNING"},
        "loggers": {
            **{name: {"handlers": ["console"], "level": level_name, "propagate": False} for name in APP_LOGGERS},
            "django.request": {"handlers": ["console"], "level": "WARNING", "propagate": False},
        },
    }
