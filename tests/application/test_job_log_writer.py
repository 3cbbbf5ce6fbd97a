from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any

import pytest

from lib_joblog.adapters.buffered_sink import BufferedSink
from lib_joblog.application.event_bus import EventBus
from lib_joblog.application.job_log_writer import JobLogWriter
from lib_joblog.config import JobLogConfig
from lib_joblog.domain.blocks import HORIZONTAL_RULE
from lib_joblog.domain.events import EventKind, LifecycleEvent, WriteEvent, WrittenEvent
from lib_joblog.domain.timestamps import format_server_time


def _lines(writer: JobLogWriter) -> list[str]:
    return writer.get_buffer().split("\n")


# ---------------------------------------------------------------- body writes


def test_first_body_write_opens_a_fenced_block(writer: JobLogWriter) -> None:
    assert writer.is_pre_block_open is False

    assert writer.write_line("hello") == "```\nhello"
    assert writer.is_pre_block_open is True
    assert writer.write_line("again") == "again"
    assert writer.get_buffer() == "```\nhello\nagain\n"


def test_write_line_indents_at_current_level(writer: JobLogWriter) -> None:
    writer.indent()
    writer.write_line("first")
    assert writer.write_line("second") == "    second"


def test_continuation_writes_are_not_reindented(writer: JobLogWriter) -> None:
    writer.indent()
    writer.write("Reading {0}", "file.csv")
    assert writer.write(" (large)") == " (large)"
    assert writer.write_line(" done") == " done"
    assert _lines(writer)[1] == "    Reading file.csv (large) done"


def test_multiline_text_is_indented_on_every_line(writer: JobLogWriter) -> None:
    writer.indent()
    writer.write_line("a\r\nb\rc\nd")
    assert _lines(writer)[1:5] == ["    a", "    b", "    c", "    d"]


def test_literal_braces_need_no_escaping_without_arguments(writer: JobLogWriter) -> None:
    writer.write_line("payload={\"id\": 1}")
    assert _lines(writer)[1] == 'payload={"id": 1}'


def test_template_errors_propagate_and_leave_state_untouched(writer: JobLogWriter) -> None:
    seen: list[Any] = []
    writer.subscribe(EventKind.WRITING, seen.append)

    with pytest.raises(KeyError):
        writer.write_line("{missing}", present=1)

    assert seen == []
    assert writer.get_buffer() == ""
    assert writer.is_pre_block_open is False


# ------------------------------------------------------------- indentation


def test_unindent_underflow_is_clamped(writer: JobLogWriter) -> None:
    writer.unindent()
    writer.unindent()
    assert writer.indentation_level == 0
    writer.indent()
    assert writer.indentation_level == 1
    assert writer.indentation_prefix == "    "


def test_block_begin_end_is_level_neutral(writer: JobLogWriter) -> None:
    writer.indent()

    assert writer.block_begin("X") == "```\n    [BEGIN] X:"
    assert writer.indentation_level == 2
    writer.write_line("inner")
    assert writer.block_end() == "    [END]"

    assert writer.indentation_level == 1
    assert writer.get_buffer().endswith("\n    [END]\n")
    assert _lines(writer)[2] == "        inner"


def test_block_end_unindents_before_writing(writer: JobLogWriter) -> None:
    writer.block_begin("outer")
    writer.block_begin("inner")
    writer.block_end()
    writer.block_end()
    assert _lines(writer)[1:5] == ["[BEGIN] outer:", "    [BEGIN] inner:", "    [END]", "[END]"]


@pytest.mark.parametrize(
    ("title", "expected"),
    [
        ("Step", "[BEGIN] Step:"),
        ("Step:", "[BEGIN] Step:"),
        ("Step : ", "[BEGIN] Step:"),
        ("Step\t", "[BEGIN] Step:"),
        ("", "[BEGIN]:"),
    ],
)
def test_block_begin_normalises_trailing_colon(writer: JobLogWriter, title: str, expected: str) -> None:
    writer.block_begin(title)
    assert _lines(writer)[1] == expected


def test_try_helpers_share_a_line(writer: JobLogWriter) -> None:
    writer.indent()
    assert writer.try_to("Reading {0}", "f.csv") == "```\n    Reading f.csv... "
    assert writer.try_ok("{0} rows", 3) == "[OK] 3 rows"
    writer.try_to("Sending")
    assert writer.try_ko("") == "[KO]"
    assert _lines(writer)[1:3] == ["    Reading f.csv... [OK] 3 rows", "    Sending... [KO]"]


# ---------------------------------------------------------------- sections


@pytest.mark.parametrize(("level", "depth"), [(0, 1), (1, 2), (5, 6), (10, 6)])
def test_section_heading_depth_follows_indentation(writer: JobLogWriter, level: int, depth: int) -> None:
    for _ in range(level):
        writer.indent()

    value = writer.write_section("Title")

    assert value == "\n" + "#" * depth + " Title\n```\n"
    assert writer.is_pre_block_open is True
    assert writer.last_char_was_line_break is True


def test_section_closes_open_block_and_bypasses_indentation(writer: JobLogWriter) -> None:
    writer.indent()
    writer.write("partial")

    value = writer.write_section("Step {0}", 2)

    assert value == "\n```\n\n## Step 2\n```\n"
    writer.write_line("body")
    assert writer.get_buffer() == "```\n    partial\n```\n\n## Step 2\n```\n    body\n"


def test_section_after_complete_line_emits_blank_line(writer: JobLogWriter) -> None:
    writer.write_line("body")
    writer.write_section("Next")
    assert writer.get_buffer() == "```\nbody\n```\n\n# Next\n```\n"


def test_consecutive_sections_do_not_stack_fences(writer: JobLogWriter) -> None:
    writer.write_section("One")
    writer.write_section("Two")
    assert writer.get_buffer() == "\n# One\n```\n```\n\n# Two\n```\n"


# ------------------------------------------------------------ header/footer


def test_header_without_title(writer: JobLogWriter, job_config: JobLogConfig) -> None:
    value = writer.write_header()

    assert value.split("\n") == [
        "[SUPPORT-GUID: ABC-123]",
        "[EXECUTION STARTED AT 2025-09-23 12:00:00 UTC+00:00]",
        f"[EXECUTION STARTED AT {format_server_time(job_config.begin_time)} (SERVER-TIME)]".upper(),
        HORIZONTAL_RULE,
        "",
    ]
    assert writer.indentation_level == 1
    assert writer.indentation_prefix == "    "
    assert writer.is_pre_block_open is False


def test_header_with_title_and_tags(sink: BufferedSink, fixed_clock: Any, job_config: JobLogConfig) -> None:
    config = job_config.with_changes(
        title="Nightly import",
        description="Imports customers",
        schedule="Daily 02:00",
        tags="[crm][nightly]",
        support_notes=None,
        credits="Ops",
    )
    writer = JobLogWriter(sink, config, clock=fixed_clock)

    lines = writer.write_header().split("\n")

    assert lines[0] == "[SUPPORT-GUID: ABC-123][CRM][NIGHTLY]"
    assert lines[3:] == [
        "",
        "# Nightly import",
        HORIZONTAL_RULE,
        "- Description: Imports customers",
        "- Schedule: Daily 02:00",
        "- Support Notes:",
        "- Credits: Ops",
        HORIZONTAL_RULE,
        "",
    ]


def test_header_resets_previous_indentation(writer: JobLogWriter) -> None:
    for _ in range(3):
        writer.indent()
    writer.write_header()
    assert writer.indentation_level == 1


def test_header_mid_log_closes_the_open_block(writer: JobLogWriter) -> None:
    writer.write("dangling")
    value = writer.write_header()
    assert value.startswith("\n```\n[SUPPORT-GUID: ABC-123]\n")
    assert writer.is_pre_block_open is False


def test_footer_without_open_block_only_terminates_the_line(writer: JobLogWriter) -> None:
    seen: list[WriteEvent] = []
    writer.subscribe(EventKind.WRITING, seen.append)

    assert writer.write_footer() == ""
    assert writer.get_buffer() == "\n"
    assert len(seen) == 1
    assert seen[0].is_line_write is True


def test_footer_uses_clock_and_begin_time_by_default(writer: JobLogWriter, fixed_clock: Any) -> None:
    writer.write_line("work")

    lines = writer.write_footer().split("\n")

    assert lines[0] == "```"
    assert lines[1] == HORIZONTAL_RULE
    assert lines[2] == "[EXECUTION FINISHED AT 2025-09-23 12:30:00 UTC+00:00]"
    assert lines[3] == f"[EXECUTION FINISHED AT {format_server_time(fixed_clock.now())} (SERVER-TIME)]".upper()
    assert lines[4] == "[EXECUTION TIME 0H:30M:00S]"
    assert writer.is_pre_block_open is False


def test_footer_accepts_explicit_times_and_resets_indentation(writer: JobLogWriter) -> None:
    start = datetime(2025, 1, 1, 8, 0, 0, tzinfo=timezone.utc)
    writer.indent()
    writer.indent()
    writer.write("unterminated")

    value = writer.write_footer(start, start + timedelta(hours=3, seconds=7))

    assert value.startswith("\n```\n" + HORIZONTAL_RULE + "\n")
    assert value.endswith("[EXECUTION TIME 3H:00M:07S]")
    assert writer.indentation_level == 0


def test_header_body_footer_end_to_end(writer: JobLogWriter, job_config: JobLogConfig) -> None:
    finished = job_config.begin_time + timedelta(hours=1, minutes=2, seconds=3)

    writer.write_header()
    writer.write_line("hello")
    writer.write_footer(end_time=finished)

    assert _lines(writer) == [
        "[SUPPORT-GUID: ABC-123]",
        "[EXECUTION STARTED AT 2025-09-23 12:00:00 UTC+00:00]",
        f"[EXECUTION STARTED AT {format_server_time(job_config.begin_time)} (SERVER-TIME)]".upper(),
        HORIZONTAL_RULE,
        "```",
        "    hello",
        "```",
        HORIZONTAL_RULE,
        "[EXECUTION FINISHED AT 2025-09-23 13:02:03 UTC+00:00]",
        f"[EXECUTION FINISHED AT {format_server_time(finished)} (SERVER-TIME)]".upper(),
        "[EXECUTION TIME 1H:02M:03S]",
        "",
    ]


# ------------------------------------------------------------------ events


def test_failing_writing_subscriber_does_not_block_the_next(writer: JobLogWriter) -> None:
    calls: list[WriteEvent] = []

    def broken(event: WriteEvent) -> None:
        raise RuntimeError("subscriber failure")

    writer.subscribe(EventKind.WRITING, broken)
    writer.subscribe(EventKind.WRITING, calls.append)

    assert writer.write_line("one") == "```\none"
    assert writer.write("two") == "two"

    assert [event.raw_format for event in calls] == ["one", "two"]
    assert writer.get_buffer() == "```\none\ntwo"


def test_writing_event_carries_pre_transform_payload(writer: JobLogWriter) -> None:
    seen: list[WriteEvent] = []
    writer.subscribe(EventKind.WRITING, seen.append)
    writer.indent()

    writer.block_begin("Load {table}", table="users")

    event = seen[0]
    assert event.raw_format == "[BEGIN] Load {table}:"
    assert dict(event.kwargs) == {"table": "users"}
    assert event.indentation_level == 1
    assert event.indentation_prefix == "    "
    assert writer.indentation_level == 2


def test_written_event_matches_returned_text(writer: JobLogWriter) -> None:
    seen: list[WrittenEvent] = []
    writer.subscribe(EventKind.WRITTEN, seen.append)

    returned = [writer.write_line("a"), writer.write_section("S"), writer.write("b")]

    assert [event.final_text for event in seen] == returned
    assert [event.is_line_write for event in seen] == [True, False, False]


def test_configured_handlers_are_subscribed_once(sink: BufferedSink, fixed_clock: Any) -> None:
    counts = {"init": 0, "writing": 0, "written": 0, "disposing": 0}

    def counter(name: str):
        def handler(payload: Any) -> None:
            counts[name] += 1

        return handler

    config = JobLogConfig(
        on_init=counter("init"),
        on_writing=counter("writing"),
        on_written=counter("written"),
        on_disposing=counter("disposing"),
    )
    with JobLogWriter(sink, config, clock=fixed_clock) as writer:
        for index in range(3):
            writer.write_line("line {0}", index)

    assert counts == {"init": 1, "writing": 3, "written": 3, "disposing": 1}


def test_init_reaches_config_and_bus_subscribers_once(sink: BufferedSink, fixed_clock: Any) -> None:
    bus = EventBus()
    seen: list[tuple[str, LifecycleEvent]] = []
    bus.subscribe(EventKind.INIT, lambda event: seen.append(("bus", event)))
    config = JobLogConfig(on_init=lambda event: seen.append(("config", event)))

    JobLogWriter(sink, config, bus=bus, clock=fixed_clock)

    assert [source for source, _ in seen] == ["bus", "config"]
    assert all(event.kind is EventKind.INIT for _, event in seen)


def test_close_fires_disposing_once(writer: JobLogWriter) -> None:
    seen: list[LifecycleEvent] = []
    writer.subscribe(EventKind.DISPOSING, seen.append)
    writer.close()
    writer.close()
    assert len(seen) == 1


def test_reset_buffer_keeps_writer_state(writer: JobLogWriter) -> None:
    writer.write_line("before")
    writer.reset_buffer()
    writer.write_line("after")
    assert writer.get_buffer() == "after\n"


def test_naive_clock_times_are_read_as_server_local(sink: BufferedSink, job_config: JobLogConfig) -> None:
    class NaiveClock:
        def now(self) -> datetime:
            return datetime(2025, 9, 23, 14, 0, 0)

    lifecycle: list[LifecycleEvent] = []
    writer = JobLogWriter(sink, job_config.with_changes(on_init=lifecycle.append), clock=NaiveClock())
    writer.subscribe(EventKind.DISPOSING, lifecycle.append)
    writer.write_line("work")

    footer = writer.write_footer()
    writer.close()

    assert [event.kind for event in lifecycle] == [EventKind.INIT, EventKind.DISPOSING]
    assert all(event.occurred_at.tzinfo is not None for event in lifecycle)
    expected = datetime(2025, 9, 23, 14, 0, 0).astimezone()
    assert f"[EXECUTION FINISHED AT {format_server_time(expected)} (SERVER-TIME)]".upper() in footer
