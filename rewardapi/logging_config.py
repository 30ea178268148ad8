import logging.config
import sys

# 원장 변경 로그는 발생 위치까지 남김
LEDGER_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s:%(lineno)d | %(message)s"


def setup_logging(log_level: str = "INFO", sql_echo: bool = False):
    """콘솔 로깅 구성

    rewardapi 로거는 전용 포맷의 stdout 핸들러를 쓰고, WARNING 이상은 stderr 로도 보냅니다.
    sql_echo 가 켜지면 SQLAlchemy 엔진 로그(INFO)를 함께 출력합니다.
    """
    log_level = log_level.upper()

    LOGGING_CONFIG = {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "detailed": {
                "format": "%(asctime)s | %(levelname)-8s | %(name)s\n%(pathname)s:%(lineno)d\n%(message)s",
            },
            "simple": {
                "format": "%(asctime)s | %(levelname)-8s | %(name)-20s | %(message)s",
            },
            "ledger": {
                "format": LEDGER_FORMAT,
            },
        },
        "handlers": {
            "console": {
                "formatter": "simple",
                "class": "logging.StreamHandler",
                "stream": sys.stdout,
            },
            "ledger_console": {
                "formatter": "ledger",
                "class": "logging.StreamHandler",
                "stream": sys.stdout,
            },
            "error_console": {
                "formatter": "detailed",
                "class": "logging.StreamHandler",
                "stream": sys.stderr,
                "level": "WARNING",
            },
        },
        "loggers": {
            "": {  # root logger
                "handlers": ["console", "error_console"],
                "level": log_level,
                "propagate": True,
            },
            "rewardapi": {
                "handlers": ["ledger_console", "error_console"],
                "level": log_level,
                "propagate": False,
            },
            "sqlalchemy.engine": {
                "handlers": ["console"],
                "level": "INFO" if sql_echo else "WARNING",
                "propagate": False,
            },
            "uvicorn.error": {
                "handlers": ["console", "error_console"],
                "level": log_level,
                "propagate": False,
            },
            "uvicorn.access": {
                "handlers": ["console"],
                "level": log_level,
                "propagate": False,
            },
        },
    }
    logging.config.dictConfig(LOGGING_CONFIG)
