import json
import logging

from .version import VERSION


class JSONFormatter(logging.Formatter):
    def __init__(self, stack_name: str = None, region: str = None, **kwargs):
        super().__init__(**kwargs)
        self.stack_name = stack_name
        self.region = region

    def format(self, record: logging.LogRecord):
        obj = {
            "level": record.levelname,
            "message": record.getMessage(),
            "function": f"{record.module}.{record.funcName}",
            "stack_name": self.stack_name,
            "region": self.region,
            "stacksmith_version": f"v{VERSION}",
        }
        if record.exc_info is not None:
            obj["exception"] = self.formatException(record.exc_info)

        return json.dumps(obj)


def logging_config(stack_name: str = None, region: str = None, level: str = "INFO") -> dict:
    ret = {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "json": {
                "()": JSONFormatter,
                "stack_name": stack_name,
                "region": region,
            },
        },
        "handlers": {
            "stderr": {
                "class": "logging.StreamHandler",
                "stream": "ext://sys.stderr",
                "level": level,
                "formatter": "json",
            },
        },
        "loggers": {
            "": {
                "handlers": ["stderr"],
                "level": level,
            },
        },
    }
    return ret
