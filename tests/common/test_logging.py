from __future__ import annotations

import logging
import time

import pytest

from configurer.common.logging import NOTICE, benchmark, notice, thinmark

log = logging.getLogger("configurer.tests.logging")


def test_notice_level_is_registered(caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.DEBUG):
        notice(log, "Using cached catalog for %s", "node")

    assert caplog.records[0].levelno == NOTICE
    assert caplog.records[0].levelname == "NOTICE"
    assert caplog.messages == ["Using cached catalog for node"]


def test_thinmark_records_elapsed_even_on_error() -> None:
    with pytest.raises(RuntimeError), thinmark() as elapsed:
        time.sleep(0.01)
        raise RuntimeError("boom")

    assert len(elapsed) == 1
    assert elapsed[0] > 0


def test_benchmark_logs_on_success(caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.DEBUG), benchmark(log, NOTICE, "Finished catalog run"):
        pass

    assert caplog.records[0].levelno == NOTICE
    assert caplog.messages[0].startswith("Finished catalog run in ")
    assert caplog.messages[0].endswith(" seconds")


def test_benchmark_is_silent_on_failure(caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.DEBUG), pytest.raises(ValueError), benchmark(log, NOTICE, "Finished"):
        raise ValueError("bad")

    assert caplog.messages == []
