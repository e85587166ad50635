import logging
from logging.config import dictConfig
import socket

from horeca_catalog.core.config import settings


class HostnameFilter(logging.Filter):
    def filter(self, record):
        record.hostname = socket.gethostname()
        return True


_LOGGING_CONFIGURED = False


def build_log_config(level: str = "INFO") -> dict:
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "filters": {
            "hostname": {"()": HostnameFilter},
        },
        "formatters": {
            "json": {
                "()": "pythonjsonlogger.json.JsonFormatter",
                "format": "%(asctime)s %(levelname)s %(name)s %(message)s %(hostname)s",
                "datefmt": "%Y-%m-%d %H:%M:%S",
            }
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "json",
                "filters": ["hostname"],
                "stream": "ext://sys.stdout",
            },
        },
        "loggers": {
            # 핸들러는 root 에만 (중복 출력 방지)
            "horeca_catalog": {
                "level": level,
                "propagate": True,
            },
            # 시끄러운 라이브러리
            "uvicorn.access": {"level": "WARNING"},
            "pymongo": {"level": "WARNING"},
            "opentelemetry": {"level": "WARNING"},
        },
        "root": {
            "handlers": ["console"],
            "level": level,
        },
    }


def initialize_logging():
    """로깅 설정 적용 (프로세스당 한 번)"""
    global _LOGGING_CONFIGURED
    if _LOGGING_CONFIGURED:
        return
    dictConfig(build_log_config(settings.LOG_LEVEL.upper()))
    _LOGGING_CONFIGURED = True
    logging.getLogger(__name__).info("Logging configured.", extra={"level": settings.LOG_LEVEL})


def get_configured_logger(name: str = None) -> logging.Logger:
    return logging.getLogger(name) if name else logging.getLogger("horeca_catalog")
