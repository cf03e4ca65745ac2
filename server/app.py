from __future__ import annotations

import json
import logging
import re
import time
import uuid
from typing import Optional

from flask import Flask, g, request
from flask_cors import CORS
from werkzeug.exceptions import HTTPException

from ledger import CoreService
from ledger.errors import ServiceError, UploadError
from ledger.llm import ChatClient, TransactionExtractor, build_prompt, load_schema
from ledger.models import ExtractionResult
from ledger.openai_http import OpenAIHttp
from ledger.storage import UploadStore
from ledger.stt import STT

from .config import ServerConfig
from .runtime_logging import context_extra, log_request

logger = logging.getLogger(__name__)

_REQUEST_ID_RE = re.compile(r"^[A-Za-z0-9_-]{1,64}$")

# Room for multipart boundaries and part headers on top of the file itself.
MULTIPART_OVERHEAD_BYTES = 64 * 1024


def build_service(config: ServerConfig) -> CoreService:
    prompt = build_prompt(load_schema())

    stt_http = OpenAIHttp(
        config.openai_api_key,
        base_url=config.openai_base_url,
        timeout=config.http_timeout_seconds,
        service="transcription",
    )
    chat_http = OpenAIHttp(
        config.openai_api_key,
        base_url=config.openai_base_url,
        timeout=config.http_timeout_seconds,
        service="completion",
    )

    return CoreService(
        store=UploadStore(
            config.incoming_dir,
            keep_files=config.keep_uploads,
            max_bytes=config.max_upload_bytes,
        ),
        stt=STT(stt_http, model_name=config.transcription_model),
        extractor=TransactionExtractor(
            ChatClient(chat_http),
            prompt,
            model=config.completion_model,
            max_tokens=config.completion_max_tokens,
            temperature=config.completion_temperature,
        ),
    )


def _request_id() -> str:
    supplied = request.headers.get("X-Request-ID", "")
    if _REQUEST_ID_RE.match(supplied):
        return supplied
    return uuid.uuid4().hex


def _json_response(app: Flask, payload, status: int = 200):
    body = json.dumps(payload, ensure_ascii=False) + "\n"
    return app.response_class(body, status=status, mimetype="application/json")


def _error_response(app: Flask, kind: str, detail: str, status: int):
    return _json_response(
        app,
        {"error": kind, "detail": detail, "request_id": g.get("request_id", "-")},
        status=status,
    )


def _transaction_response(app: Flask, result: ExtractionResult, encoding: str):
    if encoding == "object":
        payload = result.transaction.to_dict()
    else:
        # JSON string literal wrapping the record's JSON
        payload = result.transaction.to_json()

    response = _json_response(app, payload)
    response.headers["X-Extraction-Status"] = result.status.value
    return response


def create_app(
    config: Optional[ServerConfig] = None,
    service: Optional[CoreService] = None,
) -> Flask:
    """Build the Flask app. Raises ConfigError before anything is served."""
    config = config or ServerConfig.from_env()
    config.validate()
    config.ensure_directories()
    service = service or build_service(config)

    app = Flask(__name__)
    app.config["MAX_CONTENT_LENGTH"] = config.max_upload_bytes + MULTIPART_OVERHEAD_BYTES
    app.extensions["voice_ledger"] = {"config": config, "service": service}
    CORS(app, origins=list(config.cors_origins), send_wildcard="*" in config.cors_origins)

    @app.before_request
    def _start_request():
        g.request_id = _request_id()
        g.started = time.perf_counter()

    @app.after_request
    def _log_request(response):
        request_id = g.get("request_id", "-")
        response.headers["X-Request-ID"] = request_id
        elapsed_ms = (time.perf_counter() - g.get("started", time.perf_counter())) * 1000
        log_request(logger, request.method, request.path, response.status_code, elapsed_ms, request_id)
        return response

    @app.post("/upload")
    def upload():
        file = request.files.get("file")
        if file is None or not file.filename:
            raise UploadError("missing multipart file field 'file'")

        logger.info(
            "Upload received",
            extra=context_extra(request_id=g.request_id, upload=file.filename, stage="receive"),
        )
        result = service.handle_audio(file, request_id=g.request_id)
        logger.info(
            "Extraction %s",
            result.status.value,
            extra=context_extra(request_id=g.request_id, upload=file.filename, stage="extract"),
        )
        return _transaction_response(app, result, config.response_encoding)

    @app.get("/health")
    def health():
        return {"status": "ok"}

    @app.get("/status")
    def status():
        return service.status()

    @app.errorhandler(UploadError)
    def _upload_error(exc: UploadError):
        logger.warning(
            "Rejected upload: %s",
            exc,
            extra=context_extra(request_id=g.get("request_id"), stage="receive"),
        )
        return _error_response(app, exc.kind, str(exc), exc.http_status)

    @app.errorhandler(ServiceError)
    def _service_error(exc: ServiceError):
        logger.error(
            "%s",
            exc,
            extra=context_extra(request_id=g.get("request_id"), stage=exc.service),
        )
        return _error_response(app, exc.kind.value, str(exc), exc.http_status)

    @app.errorhandler(HTTPException)
    def _http_error(exc: HTTPException):
        kind = (exc.name or "error").lower().replace(" ", "_")
        return _error_response(app, kind, exc.description or "", exc.code or 500)

    @app.errorhandler(Exception)
    def _unexpected_error(exc: Exception):
        logger.exception(
            "Unhandled error",
            extra=context_extra(request_id=g.get("request_id"), stage="internal"),
        )
        return _error_response(app, "internal", "internal server error", 500)

    return app


__all__ = ["build_service", "create_app"]
