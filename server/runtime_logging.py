from __future__ import annotations

import logging
from typing import Optional


DEFAULT_LOG_FIELDS = {
    "request_id": "-",
    "upload": "-",
    "stage": "-",
}


class _StructuredFieldFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        for key, value in DEFAULT_LOG_FIELDS.items():
            if not hasattr(record, key):
                setattr(record, key, value)
        return True


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=(
            "%(asctime)s %(levelname)s %(name)s "
            "request_id=%(request_id)s upload=%(upload)s stage=%(stage)s "
            "%(message)s"
        ),
        force=True,
    )
    root = logging.getLogger()
    filter_installed = any(isinstance(f, _StructuredFieldFilter) for f in root.filters)
    if not filter_installed:
        root.addFilter(_StructuredFieldFilter())
    for handler in root.handlers:
        handler_filter_installed = any(isinstance(f, _StructuredFieldFilter) for f in handler.filters)
        if not handler_filter_installed:
            handler.addFilter(_StructuredFieldFilter())


def context_extra(
    request_id: Optional[str] = None,
    upload: Optional[str] = None,
    stage: Optional[str] = None,
) -> dict[str, str]:
    extra = dict(DEFAULT_LOG_FIELDS)
    if request_id:
        extra["request_id"] = request_id
    if upload:
        extra["upload"] = upload
    if stage:
        extra["stage"] = stage
    return extra


def request_log_level(status: int) -> int:
    if status >= 500:
        return logging.ERROR
    if status >= 400:
        return logging.WARNING
    return logging.INFO


def log_request(
    logger: logging.Logger,
    method: str,
    path: str,
    status: int,
    elapsed_ms: float,
    request_id: Optional[str] = None,
) -> None:
    """One access line per request, at a level that follows the response status."""
    logger.log(
        request_log_level(status),
        "%s %s -> %s (%.1f ms)",
        method,
        path,
        status,
        elapsed_ms,
        extra=context_extra(request_id=request_id, stage="respond"),
    )
