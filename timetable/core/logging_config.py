import contextvars
import logging
import logging.config
import time
import uuid
from pathlib import Path

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

# Request id of the request currently being served
request_id_var: contextvars.ContextVar[str] = contextvars.ContextVar("request_id", default="-")

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s [%(request_id)s] %(message)s"


class RequestIdFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:  # type: ignore[override]
        record.request_id = request_id_var.get("-")
        return True


def build_logging_config(*, level: str, to_file: bool, file_path: str, max_bytes: int, backup_count: int) -> dict:
    level = level.upper()
    handlers = {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "default",
            "filters": ["request_id"],
        },
    }
    if to_file:
        handlers["file"] = {
            "class": "logging.handlers.RotatingFileHandler",
            "formatter": "default",
            "filters": ["request_id"],
            "filename": file_path,
            "maxBytes": max_bytes,
            "backupCount": backup_count,
            "encoding": "utf-8",
        }
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "filters": {"request_id": {"()": RequestIdFilter}},
        "formatters": {"default": {"format": LOG_FORMAT, "datefmt": "%Y-%m-%d %H:%M:%S"}},
        "handlers": handlers,
        "root": {"level": level, "handlers": list(handlers)},
        "loggers": {
            # uvicorn access lines duplicate RequestIdMiddleware output
            "uvicorn.access": {"level": "WARNING"},
            "sqlalchemy.engine": {"level": "WARNING"},
        },
    }


def setup_logging(*, level: str = "INFO", to_file: bool = True, file_path: str = "logs/app.log", max_bytes: int = 10 * 1024 * 1024, backup_count: int = 5) -> None:
    if to_file:
        try:
            Path(file_path).parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            to_file = False
            logging.getLogger(__name__).warning("File logging disabled, cannot create %s: %s", file_path, e)
    logging.config.dictConfig(
        build_logging_config(level=level, to_file=to_file, file_path=file_path, max_bytes=max_bytes, backup_count=backup_count)
    )


class RequestIdMiddleware(BaseHTTPMiddleware):
    """Propagates X-Request-ID and logs one line per request and response."""

    def __init__(self, app: ASGIApp) -> None:
        super().__init__(app)
        self.logger = logging.getLogger("request")

    async def dispatch(self, request: Request, call_next):
        start = time.perf_counter()
        rid = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        token = request_id_var.set(rid)
        try:
            self.logger.info("%s %s from %s", request.method, request.url.path, request.client.host if request.client else "-")
            response = await call_next(request)
            response.headers["X-Request-ID"] = rid
            self.logger.info(
                "%s %s -> %s in %.1fms",
                request.method,
                request.url.path,
                response.status_code,
                (time.perf_counter() - start) * 1000,
            )
            return response
        except Exception:
            self.logger.exception("Unhandled error during request processing")
            raise
        finally:
            request_id_var.reset(token)
