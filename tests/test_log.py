import json
import logging

import structlog

from secure_server_fetch.log import setup_logging


def test_setup_logging_emits_json(capsys):
    """Events should render as JSON carrying the service name."""
    setup_logging(service_name="unit-test", level="DEBUG")
    try:
        structlog.get_logger("secure_server_fetch.test").info("hello", answer=42)

        line = capsys.readouterr().out.strip().splitlines()[-1]
        event = json.loads(line)

        assert event["event"] == "hello"
        assert event["answer"] == 42
        assert event["service"] == "unit-test"
        assert event["level"] == "info"
    finally:
        structlog.contextvars.clear_contextvars()
        structlog.reset_defaults()
        logging.getLogger().handlers.clear()
