import contextvars
import json
import logging
import logging.config

# request-scoped identifier
_request_id_ctx = contextvars.ContextVar("request_id", default="-")

TEXT_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | rid=%(request_id)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


class RequestIdFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = _request_id_ctx.get("-")
        return True


class JsonFormatter(logging.Formatter):
    """One JSON object per line; tracebacks go in ``exc_info``."""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "ts": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "request_id": getattr(record, "request_id", "-"),
            "msg": record.getMessage(),
        }

        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)

        return json.dumps(payload, ensure_ascii=False, default=str)


def set_request_id(req_id: str):
    _request_id_ctx.set(req_id)


def get_logger(name: str = __name__) -> logging.Logger:
    return logging.getLogger(name)


def build_dict_config(level: str = "INFO", json_fmt: bool = False) -> dict:
    if json_fmt:
        formatter = {"()": JsonFormatter, "datefmt": DATE_FORMAT}
    else:
        formatter = {"format": TEXT_FORMAT, "datefmt": DATE_FORMAT}

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "filters": {
            "request_id": {"()": RequestIdFilter},
        },
        "formatters": {
            "default": formatter,
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "level": level,
                "formatter": "default",
                "filters": ["request_id"],
            },
        },
        "loggers": {
            "": {
                "level": level,
                "handlers": ["console"],
            },
            "uvicorn": {"level": level},
            "uvicorn.error": {"level": level},
            "uvicorn.access": {"level": level},
            "sqlalchemy.engine": {"level": "WARNING"},
        },
    }


def setup_logging(level: str = "INFO", json_fmt: bool = False):
    logging.config.dictConfig(build_dict_config(level=level.upper(), json_fmt=json_fmt))
