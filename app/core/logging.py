import logging
import sys
import uuid
from contextvars import ContextVar
from typing import TextIO

request_id_ctx: ContextVar[str] = ContextVar("request_id", default="-")

# chatty third-party loggers that only matter when debugging
QUIET_LOGGERS = ("httpx", "httpcore")


class RequestIdFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = request_id_ctx.get()
        return True


def configure_logging(level: str = "INFO", stream: TextIO | None = None) -> None:
    """
    One handler on the root logger, tagging every record with the id of the
    request being served ("-" outside a request). The CLI passes stderr so its
    own output on stdout stays clean.
    """
    root = logging.getLogger()
    root.setLevel(level.upper())

    handler = logging.StreamHandler(stream or sys.stdout)
    handler.setFormatter(
        logging.Formatter(
            fmt="%(asctime)s %(levelname)s request_id=%(request_id)s %(name)s: %(message)s"
        )
    )
    handler.addFilter(RequestIdFilter())

    root.handlers.clear()
    root.addHandler(handler)

    if root.level > logging.DEBUG:
        for name in QUIET_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)


def new_request_id() -> str:
    return uuid.uuid4().hex[:16]
