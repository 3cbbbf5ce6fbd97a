from __future__ import annotations

from datetime import datetime, timedelta, timezone
from io import StringIO

import pytest
from rich.console import Console

from lib_joblog.adapters.buffered_sink import BufferedSink
from lib_joblog.application.job_log_writer import JobLogWriter
from lib_joblog.config import JobLogConfig

BEGIN_TIME = datetime(2025, 9, 23, 12, 0, 0, tzinfo=timezone.utc)


class FixedClock:
    """Clock double returning a settable timezone-aware instant."""

    def __init__(self, current: datetime) -> None:
        self.current = current

    def now(self) -> datetime:
        return self.current

    def advance(self, **delta: float) -> None:
        self.current = self.current + timedelta(**delta)


@pytest.fixture
def record_console() -> Console:
    return Console(file=StringIO(), record=True, force_terminal=False, color_system=None, width=120)


@pytest.fixture
def fixed_clock() -> FixedClock:
    return FixedClock(BEGIN_TIME + timedelta(minutes=30))


@pytest.fixture
def sink() -> BufferedSink:
    return BufferedSink(disable_stream=True)


@pytest.fixture
def job_config() -> JobLogConfig:
    return JobLogConfig(support_guid="abc-123", begin_time=BEGIN_TIME)


@pytest.fixture
def writer(sink: BufferedSink, job_config: JobLogConfig, fixed_clock: FixedClock) -> JobLogWriter:
    return JobLogWriter(sink, job_config, clock=fixed_clock)
