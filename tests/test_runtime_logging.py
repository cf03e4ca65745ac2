import logging

import pytest

from server.runtime_logging import context_extra, log_request


@pytest.mark.parametrize(
    "status,level",
    [(200, logging.INFO), (415, logging.WARNING), (503, logging.ERROR)],
)
def test_access_line_level_follows_status(caplog, status, level):
    logger = logging.getLogger("tests.access")
    with caplog.at_level(logging.DEBUG, logger="tests.access"):
        log_request(logger, "POST", "/upload", status, 12.34, request_id="abc")

    (record,) = caplog.records
    assert record.levelno == level
    assert record.getMessage() == f"POST /upload -> {status} (12.3 ms)"
    assert record.request_id == "abc"
    assert record.stage == "respond"
    assert record.upload == "-"


def test_context_extra_fills_defaults():
    assert context_extra(stage="extract") == {"request_id": "-", "upload": "-", "stage": "extract"}
