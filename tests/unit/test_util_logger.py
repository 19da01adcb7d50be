"""
Structured logger tests.

JSON output shape, context injection and the exception decorator.
"""

import json
import logging
import sys

import pytest

from util_logger import (
    ComponentType, JSONFormatter, LogContext, LogLevel, LoggerFactory, log_exceptions
)


class TestLogLevel:

    @pytest.mark.parametrize("raw,expected", [("debug", logging.DEBUG), ("Warning", logging.WARNING)])
    def test_from_string(self, raw, expected):
        assert LogLevel.from_string(raw).to_python_level() == expected

    def test_unknown_level(self):
        with pytest.raises(KeyError):
            LogLevel.from_string("loud")


class TestLogContext:

    def test_none_values_dropped(self):
        assert LogContext(run_id="r1", job_id="importexport").to_dict() == {
            'run_id': 'r1', 'job_id': 'importexport'
        }


class TestLoggerFactory:

    def test_logger_name_includes_component(self):
        logger = LoggerFactory.create_logger(ComponentType.SERVICE, "TestNaming")
        assert logger.name == "service.TestNaming"

    def test_single_json_handler(self):
        LoggerFactory.create_logger(ComponentType.SERVICE, "TestHandlers")
        logger = LoggerFactory.create_logger(ComponentType.SERVICE, "TestHandlers")
        json_handlers = [h for h in logger.handlers if isinstance(h.formatter, JSONFormatter)]
        assert len(json_handlers) == 1

    def test_logs_written_to_stderr(self):
        logger = LoggerFactory.create_logger(ComponentType.SERVICE, "TestStream")
        handler = next(h for h in logger.handlers if isinstance(h.formatter, JSONFormatter))
        assert handler.stream is sys.stderr

    def test_context_injected(self, caplog):
        logger = LoggerFactory.create_with_context(
            ComponentType.ORCHESTRATOR, "TestContext", run_id="r42", action="Export"
        )
        caplog.set_level(logging.INFO, logger=logger.name)
        logger.info("hello", extra={'custom_dimensions': {'extra_key': 1}})

        dims = caplog.records[-1].custom_dimensions
        assert dims['run_id'] == "r42"
        assert dims['action'] == "Export"
        assert dims['component_type'] == "orchestrator"
        assert dims['component_name'] == "TestContext"
        assert dims['extra_key'] == 1


class TestJSONFormatter:

    def test_one_json_object(self):
        record = logging.LogRecord("service.X", logging.INFO, __file__, 10, "msg %s", ("a",), None)
        record.custom_dimensions = {'job_id': 'importexport'}
        data = json.loads(JSONFormatter().format(record))
        assert data['message'] == "msg a"
        assert data['level'] == "INFO"
        assert data['customDimensions'] == {'job_id': 'importexport'}


class TestLogExceptions:

    def test_logs_and_reraises(self, caplog):
        logger = LoggerFactory.create_logger(ComponentType.SERVICE, "TestDecorator")
        caplog.set_level(logging.ERROR, logger=logger.name)

        @log_exceptions(logger=logger)
        def explode():
            raise RuntimeError("kaboom")

        with pytest.raises(RuntimeError, match="kaboom"):
            explode()
        record = caplog.records[-1]
        assert record.getMessage() == "Exception in explode"
        assert record.custom_dimensions['exception_type'] == "RuntimeError"

    def test_return_value_passed_through(self):
        @log_exceptions(ComponentType.FACTORY, "TestDecorator")
        def ok():
            return 7

        assert ok() == 7
