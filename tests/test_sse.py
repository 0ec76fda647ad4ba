"""Tests for SSE line framing and event assembly."""

import pytest

from pathstream.models.sse import SSEEvent
from pathstream.utils.sse import (
    EventAssembler,
    LineFramer,
    aiter_events,
    aiter_lines,
    format_sse,
    iter_events,
)


async def _agen(items):
    for item in items:
        yield item


def test_framer_joins_chunks_split_mid_line():
    framer = LineFramer()
    assert framer.feed(b'data: {"con') == []
    assert framer.feed(b'tent":"X"}\n\n') == ['data: {"content":"X"}', ""]


def test_framer_strips_crlf_split_across_chunks():
    framer = LineFramer()
    assert framer.feed("event: content\r") == []
    assert framer.feed("\ndata: x\r\n") == ["event: content", "data: x"]


def test_framer_reassembles_split_utf8_character():
    encoded = 'data: {"content":"café"}\n'.encode("utf-8")
    split_at = encoded.index("é".encode("utf-8")) + 1
    framer = LineFramer()
    assert framer.feed(encoded[:split_at]) == []
    assert framer.feed(encoded[split_at:]) == ['data: {"content":"café"}']


def test_framer_flush_returns_unterminated_tail():
    framer = LineFramer()
    framer.feed("data: tail")
    assert framer.flush() == ["data: tail"]
    assert framer.flush() == []


def test_assembler_basic_event():
    events = list(iter_events(["event: content", 'data: {"content":"Hel"}', "id: 7", ""]))
    assert events == [SSEEvent(name="content", data='{"content":"Hel"}', id="7")]


def test_assembler_joins_multiple_data_lines():
    events = list(iter_events(["data: line one", "data: line two", ""]))
    assert len(events) == 1
    assert events[0].data == "line one\nline two"
    assert events[0].name is None


def test_assembler_emits_named_event_with_empty_data():
    events = list(iter_events(["event: finish", "data: ", ""]))
    assert events == [SSEEvent(name="finish", data="")]


def test_assembler_ignores_comments_and_malformed_lines():
    lines = [":", ": keep-alive", "garbage without colon", "event: content", 'data: {"content":"a"}', ""]
    events = list(iter_events(lines))
    assert [e.name for e in events] == ["content"]


def test_assembler_consecutive_blank_lines_produce_nothing():
    assert list(iter_events(["", "", ""])) == []


def test_assembler_flushes_pending_event_at_end_of_stream():
    events = list(iter_events(["event: finish", "data: done"]))
    assert events == [SSEEvent(name="finish", data="done")]


def test_assembler_closes_previous_event_when_separator_missing():
    assembler = EventAssembler()
    assert assembler.feed_line("event: content") == []
    assert assembler.feed_line('data: {"content":"a"}') == []
    completed = assembler.feed_line("event: finish")
    assert completed == [SSEEvent(name="content", data='{"content":"a"}')]
    assert assembler.flush() == SSEEvent(name="finish", data="")


def test_assembler_does_not_split_on_event_after_empty_data():
    events = list(iter_events(["event: a", "data:", "event: b", "data: 1", ""]))
    assert events == [SSEEvent(name="b", data="\n1")]


def test_assembler_keeps_colons_inside_value():
    events = list(iter_events(['data: {"url":"https://example.com"}', ""]))
    assert events[0].data == '{"url":"https://example.com"}'


def test_event_type_is_case_insensitive():
    assert SSEEvent(name="Content", data="").event_type == "content"
    assert SSEEvent(data="x").event_type is None


def test_format_sse_round_trips_through_assembler():
    wire = format_sse("notification", '{"message":"hi"}', id="1")
    framer = LineFramer()
    events = list(iter_events(framer.feed(wire)))
    assert events == [SSEEvent(name="notification", data='{"message":"hi"}', id="1")]


@pytest.mark.asyncio
async def test_async_pipeline_from_network_chunks():
    chunks = [b"event: content\ndata: {\"con", b"tent\":\"X\"}\n\n", b"event: finish\ndata: \n\n"]
    events = [event async for event in aiter_events(aiter_lines(_agen(chunks)))]
    assert events == [
        SSEEvent(name="content", data='{"content":"X"}'),
        SSEEvent(name="finish", data=""),
    ]


@pytest.mark.asyncio
async def test_async_pipeline_without_trailing_blank_line():
    chunks = [b"event: map\ndata: []"]
    events = [event async for event in aiter_events(aiter_lines(_agen(chunks)))]
    assert events == [SSEEvent(name="map", data="[]")]
