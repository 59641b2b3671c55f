"""Tests for scrat.output.console module."""

from __future__ import annotations

import pytest

from scrat.output.console import (
    ConsoleProtocol,
    MockConsole,
    OutputRecord,
    RichConsole,
    Style,
)


class TestStyle:
    def test_str_conversion(self) -> None:
        assert str(Style.SUCCESS) == "success"
        assert str(Style.SKIPPED) == "skipped"
        assert str(Style.DEFAULT) == "default"

    def test_all_styles_exist(self) -> None:
        expected = {
            "DEFAULT",
            "SUCCESS",
            "ERROR",
            "WARNING",
            "INFO",
            "SKIPPED",
            "DIM",
            "BOLD",
            "HEADER",
        }
        assert {s.name for s in Style} == expected


class TestMockConsole:
    """MockConsole records what commands print."""

    def test_print_captures_message(self) -> None:
        console = MockConsole()
        console.print("hello", Style.DIM)
        assert console.outputs == [OutputRecord("hello", Style.DIM)]

    def test_tagged_messages(self) -> None:
        console = MockConsole()
        console.success("tagged v1.0.0")
        console.error("push failed")
        console.warning("no origin")
        console.info("dry run")

        assert console.messages == [
            "✓ tagged v1.0.0",
            "error: push failed",
            "warning: no origin",
            "info: dry run",
        ]
        assert [o.style for o in console.outputs] == [
            Style.SUCCESS,
            Style.ERROR,
            Style.WARNING,
            Style.INFO,
        ]

    def test_header_and_newline(self) -> None:
        console = MockConsole()
        console.header("pre_bump")
        console.newline()
        assert console.outputs == [
            OutputRecord("pre_bump", Style.HEADER),
            OutputRecord("", Style.DEFAULT),
        ]

    def test_helpers(self) -> None:
        console = MockConsole()
        assert console.has_error() is False
        console.print("hello world")
        console.print("hello there")
        console.error("e1")

        assert console.has_error() is True
        assert len(console.find("hello")) == 2
        assert console.count(Style.DEFAULT) == 2
        assert console.text == "hello world\nhello there\nerror: e1"


class TestRichConsole:
    def test_prints_brackets_literally(self, capsys: pytest.CaptureFixture[str]) -> None:
        console = RichConsole()
        console.print("$ echo [bold]{tag}[/bold]")
        console.error("jq '.[0]' failed")

        out = capsys.readouterr().out
        assert "$ echo [bold]{tag}[/bold]" in out
        assert "error: jq '.[0]' failed" in out

    def test_stderr(self, capsys: pytest.CaptureFixture[str]) -> None:
        RichConsole(stderr=True).success("done")

        captured = capsys.readouterr()
        assert captured.out == ""
        assert "✓ done" in captured.err


def test_consoles_satisfy_protocol() -> None:
    def use_console(c: ConsoleProtocol) -> None:
        c.print("test")
        c.success("ok")
        c.error("err")
        c.warning("warn")
        c.info("info")
        c.header("hdr")
        c.newline()

    mock = MockConsole()
    use_console(mock)
    assert len(mock.outputs) == 7
