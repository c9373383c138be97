from __future__ import annotations

import io

import pytest

from cts_harness.errors import MalformedResultError
from cts_harness.result.xml_io import (
    END_TAG,
    START_TAG,
    XmlCursor,
    XmlWriter,
    escape_unsafe,
    unescape_unsafe,
)


def test_ordinary_text_is_left_alone() -> None:
    trace = 'java.lang.AssertionError: expected "a\\b"\n\tat C:\\src\\Foo.java:1\n'
    assert escape_unsafe(trace) == trace


def test_unsafe_characters_are_escaped() -> None:
    assert escape_unsafe("a\x00b\x1bc\rd") == "a\\u0000b\\u001bc\\u000dd"


@pytest.mark.parametrize(
    "value",
    [
        "\\u0041",
        "\\\\u0041",
        "\\\x00",
        "\\U0041 \\u12",
        "\ud800 lone surrogate",
    ],
)
def test_escape_is_exactly_reversible(value: str) -> None:
    assert unescape_unsafe(escape_unsafe(value)) == value


def test_writer_output_parses_back_through_cursor() -> None:
    out = io.BytesIO()
    writer = XmlWriter(out)
    writer.start_document()
    writer.start("Root", {"message": "bell\x07", "empty": None})
    writer.text("nul\x00 cr\r\n")
    writer.end("Root")
    writer.end_document()

    cursor = XmlCursor(io.BytesIO(out.getvalue()))
    assert cursor.next_tag() == START_TAG
    assert cursor.attr("message") == "bell\x07"
    assert cursor.attr("empty") is None
    assert cursor.next() == END_TAG
    assert cursor.text == "nul\x00 cr\r\n"


def test_cursor_reports_bad_xml_as_malformed_result() -> None:
    cursor = XmlCursor.from_string("<Root><<")
    with pytest.raises(MalformedResultError, match=r"invalid XML"):
        for _ in range(10):
            cursor.next()
