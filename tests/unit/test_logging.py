"""Tests for salescrm.core.logging."""

from __future__ import annotations

import logging

import structlog

from salescrm.core.logging import configure_logging


def _own_handlers() -> list[logging.Handler]:
    return [h for h in logging.getLogger().handlers if h.get_name() == "salescrm"]


def test_reconfiguring_does_not_stack_handlers():
    configure_logging(level="DEBUG", json_logs=True)
    configure_logging(level="WARNING", json_logs=False)

    assert len(_own_handlers()) >= 1
    assert len({type(h) for h in _own_handlers()}) == len(_own_handlers())
    assert logging.getLogger().level == logging.WARNING


def test_stdlib_records_render_through_structlog():
    configure_logging(level="INFO", json_logs=True)

    handler = _own_handlers()[0]
    assert isinstance(handler.formatter, structlog.stdlib.ProcessorFormatter)
    assert logging.getLogger("aiosqlite").level == logging.WARNING
