"""Tests for revertfuzz.core.logging: formatters and seed correlation."""

from __future__ import annotations

import json
import logging
import sys

import pytest

from revertfuzz.core.logging import DevFormatter, JSONFormatter, ScenarioLogFilter, setup_logging


def _record(msg: str = "Selected failure %s", *args: object, **extra: object) -> logging.LogRecord:
    record = logging.LogRecord(
        name="revertfuzz.fuzzer.selector",
        level=logging.INFO,
        pathname=__file__,
        lineno=10,
        msg=msg,
        args=args or ("NO_CONTRACT",),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestJSONFormatter:
    def test_basic_fields(self):
        entry = json.loads(JSONFormatter().format(_record()))
        assert entry["level"] == "INFO"
        assert entry["logger"] == "revertfuzz.fuzzer.selector"
        assert entry["message"] == "Selected failure NO_CONTRACT"

    def test_scenario_fields_included(self):
        record = _record(seed=7, failure="no_contract", eligible_count=12)
        entry = json.loads(JSONFormatter().format(record))
        assert entry["seed"] == 7
        assert entry["failure"] == "no_contract"
        assert entry["eligible_count"] == 12
        assert "order_index" not in entry

    def test_exception_serialised(self):
        try:
            raise ValueError("boom")
        except ValueError:
            record = _record()
            record.exc_info = sys.exc_info()
        entry = json.loads(JSONFormatter().format(record))
        assert entry["exception"]["type"] == "ValueError"
        assert entry["exception"]["message"] == "boom"


class TestDevFormatter:
    def test_seed_prefix(self):
        out = DevFormatter().format(_record(seed=255))
        assert "[seed=0xff] Selected failure NO_CONTRACT" in out

    def test_no_seed_no_prefix(self):
        out = DevFormatter().format(_record())
        assert "[seed=" not in out


class TestScenarioLogFilter:
    def test_stamps_seed(self):
        record = _record()
        assert ScenarioLogFilter(seed=42).filter(record)
        assert record.seed == 42

    def test_keeps_explicit_seed(self):
        record = _record(seed=1)
        ScenarioLogFilter(seed=42).filter(record)
        assert record.seed == 1


class TestSetupLogging:
    @pytest.fixture(autouse=True)
    def _restore_root(self):
        root = logging.getLogger()
        handlers, level = list(root.handlers), root.level
        yield
        root.handlers[:] = handlers
        root.setLevel(level)

    @pytest.mark.parametrize(
        "env,formatter",
        [("development", DevFormatter), ("staging", JSONFormatter), ("production", JSONFormatter)],
    )
    def test_formatter_by_env(self, env, formatter):
        setup_logging(env=env, log_level="DEBUG")
        root = logging.getLogger()
        assert len(root.handlers) == 1
        assert isinstance(root.handlers[0].formatter, formatter)
        assert root.level == logging.DEBUG

    def test_unknown_level_falls_back_to_info(self):
        setup_logging(log_level="chatty")
        assert logging.getLogger().level == logging.INFO
