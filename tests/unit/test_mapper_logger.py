"""Unit tests for deterministic mapper log events."""

from __future__ import annotations

import io

import pytest
from loguru import logger

from configmapper.errors import FieldResolutionError
from configmapper.logger import MapperLogger
from configmapper.mapper import ConfigMapper
from configmapper.sections import ConfigSection
from configmapper.store import YamlConfig


class LoggedSection(ConfigSection):
    host: str = ""
    port: int = 0


def test_logger_emits_sorted_sanitized_context() -> None:
    """Event lines should list context keys in sorted order with safe tokens."""

    sink = io.StringIO()
    run_logger = MapperLogger(sink=sink, level="TRACE")
    try:
        run_logger.log_dead_end("a b", "x.a b.c")
    finally:
        run_logger.close()

    assert sink.getvalue().strip() == "[mapper] level=TRACE event=dead_end key=a_b path=x.a_b.c"


def test_logger_respects_level_threshold() -> None:
    """Events below the configured level should not reach the sink."""

    sink = io.StringIO()
    run_logger = MapperLogger(sink=sink, level="WARNING")
    try:
        run_logger.log_field("a.b", str)
        run_logger.log_failure("a.b", "CoercionError")
    finally:
        run_logger.close()

    lines = sink.getvalue().splitlines()
    assert lines == ["[mapper] level=WARNING event=failure error_type=CoercionError path=a.b"]


def test_logger_without_sink_writes_nothing() -> None:
    """A sink-less logger should be usable and silent."""

    run_logger = MapperLogger()

    run_logger.log_section_start(None, LoggedSection)
    run_logger.close()


def test_close_detaches_the_sink() -> None:
    """After `close`, later events should not reach the old sink."""

    sink = io.StringIO()
    run_logger = MapperLogger(sink=sink, level="DEBUG")
    run_logger.close()

    run_logger.log_section_start("a", LoggedSection)

    assert sink.getvalue() == ""


def test_mapper_logs_section_lifecycle_and_fields() -> None:
    """Mapping should log section start, each field and completion."""

    sink = io.StringIO()
    run_logger = MapperLogger(sink=sink, level="TRACE")
    try:
        ConfigMapper(YamlConfig({"srv": {"host": "h"}}), run_logger=run_logger).map_section(
            "srv", LoggedSection
        )
    finally:
        run_logger.close()

    lines = sink.getvalue().splitlines()
    assert lines == [
        "[mapper] level=DEBUG event=section_start path=srv type=LoggedSection",
        "[mapper] level=TRACE event=field path=srv.host type=str",
        "[mapper] level=TRACE event=field path=srv.port type=int",
        "[mapper] level=DEBUG event=section_complete fields=2 path=srv type=LoggedSection",
    ]


def test_mapper_logs_failures_with_path() -> None:
    """A failing field should produce a warning event naming the path and error type."""

    sink = io.StringIO()
    run_logger = MapperLogger(sink=sink, level="WARNING")
    try:
        with pytest.raises(FieldResolutionError):
            ConfigMapper(YamlConfig({"srv": {"port": "many"}}), run_logger=run_logger).map_section(
                "srv", LoggedSection
            )
    finally:
        run_logger.close()

    assert sink.getvalue().splitlines() == [
        "[mapper] level=WARNING event=failure error_type=CoercionError path=srv.port"
    ]


def test_root_path_is_logged_as_root_token() -> None:
    """A `None` path should be logged with a readable root token."""

    sink = io.StringIO()
    run_logger = MapperLogger(sink=sink, level="DEBUG")
    try:
        run_logger.log_section_start(None, LoggedSection)
    finally:
        run_logger.close()

    assert sink.getvalue().strip() == "[mapper] level=DEBUG event=section_start path=root type=LoggedSection"


def test_closing_the_last_sink_silences_the_package() -> None:
    """Once every sink logger is closed, mapper events reach no loguru handler."""

    MapperLogger(sink=io.StringIO()).close()

    captured: list[str] = []
    handler_id = logger.add(captured.append, level="TRACE", format="{message}")
    try:
        ConfigMapper(YamlConfig({"srv": {"host": "h"}})).map_section("srv", LoggedSection)
    finally:
        logger.remove(handler_id)

    assert captured == []


def test_package_stays_enabled_while_another_sink_is_open() -> None:
    """Closing one sink logger should not silence another that is still open."""

    first_sink = io.StringIO()
    second_sink = io.StringIO()
    first = MapperLogger(sink=first_sink, level="DEBUG")
    second = MapperLogger(sink=second_sink, level="DEBUG")
    try:
        first.close()
        second.log_section_start("srv", LoggedSection)
    finally:
        second.close()

    assert first_sink.getvalue() == ""
    assert second_sink.getvalue().strip() == "[mapper] level=DEBUG event=section_start path=srv type=LoggedSection"


def test_close_is_idempotent() -> None:
    """Closing a logger twice should not disturb other open sinks."""

    sink = io.StringIO()
    closed_twice = MapperLogger(sink=io.StringIO())
    still_open = MapperLogger(sink=sink, level="DEBUG")
    try:
        closed_twice.close()
        closed_twice.close()
        still_open.log_section_start("srv", LoggedSection)
    finally:
        still_open.close()

    assert "event=section_start" in sink.getvalue()
