"""
Tests for structured logging.
"""
import json
import logging

import pytest

from clubhq.logging_config import ClubFormatter, StructuredLogger, redact, timed


class CaptureHandler(logging.Handler):
    def __init__(self):
        super().__init__()
        self.records = []

    def emit(self, record):
        self.records.append(record)


@pytest.fixture
def captured():
    logger = StructuredLogger("clubhq.test")
    handler = CaptureHandler()
    logger.logger.addHandler(handler)
    logger.logger.setLevel(logging.DEBUG)
    yield logger, handler.records
    logger.logger.removeHandler(handler)


def test_redact_masks_contact_details():
    clean = redact({"record_id": 3, "email": "sam@example.com", "extra": {"phone": "555", "city": "Kurigram"}})
    assert clean == {"record_id": 3, "email": "***", "extra": {"phone": "***", "city": "Kurigram"}}


def test_bound_context_repeats(captured):
    logger, records = captured
    bound = logger.bind(record_kind="project", record_id=7)
    bound.info("Content approved", moderator_id=1)
    bound.info("Content edited", record_id=8)

    assert records[0].context == {"record_kind": "project", "record_id": 7, "moderator_id": 1}
    assert records[1].context["record_id"] == 8
    assert logger.context == {}


def test_json_format(captured):
    logger, records = captured
    logger.warning("Registration received", email="sam@example.com", record_id=2)
    data = json.loads(ClubFormatter("json").format(records[0]))
    assert data["level"] == "WARNING"
    assert data["logger"] == "clubhq.test"
    assert data["message"] == "Registration received"
    assert data["email"] == "***"
    assert data["record_id"] == 2


def test_error_carries_traceback(captured):
    logger, records = captured
    try:
        raise RuntimeError("store offline")
    except RuntimeError as e:
        logger.error("Store call failed", error=e)
    data = json.loads(ClubFormatter("json").format(records[0]))
    assert data["error_type"] == "RuntimeError"
    assert "store offline" in data["traceback"]


def test_text_format(captured):
    logger, records = captured
    logger.info("Client connected", client_id="client_1")
    line = ClubFormatter("text").format(records[0])
    assert line == "INFO    clubhq.test Client connected [client_id=client_1]"


def test_timed_reraises(captured):
    logger, records = captured

    @timed(logger)
    def ping():
        raise ValueError("boom")

    with pytest.raises(ValueError):
        ping()
    assert records[-1].context["operation"] == "ping"
    assert records[-1].context["error_type"] == "ValueError"
