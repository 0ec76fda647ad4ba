"""
Server-sent event framing.

LineFramer turns network chunks into lines, EventAssembler turns lines into
SSEEvent records. format_sse goes the other way and is used to build
fixture streams.

Wire format:
    event: content
    data: {"content": "Hel"}
    <blank line>
"""

import codecs
import logging
from typing import AsyncIterable, AsyncIterator, Iterable, Iterator, List, Optional, Union

from pathstream.models.sse import SSEEvent
from pathstream.utils.exceptions import FramingAnomaly

logger = logging.getLogger(__name__)

# Constants
SSE_FIELD_SEPARATOR = ":"
SSE_COMMENT_PREFIX = ":"


class LineFramer:
    """Split a chunked byte/text stream into lines, holding back partial lines."""

    def __init__(self, encoding: str = "utf-8"):
        self._decoder = codecs.getincrementaldecoder(encoding)(errors="replace")
        self._buffer = ""

    def feed(self, chunk: Union[bytes, str]) -> List[str]:
        """Add a chunk and return every line it completed."""
        if isinstance(chunk, bytes):
            chunk = self._decoder.decode(chunk)
        if not chunk:
            return []

        self._buffer += chunk
        if "\n" not in chunk:
            return []

        *lines, self._buffer = self._buffer.split("\n")
        return [line[:-1] if line.endswith("\r") else line for line in lines]

    def flush(self) -> List[str]:
        """Return the unterminated remainder at end of stream."""
        tail = self._buffer + self._decoder.decode(b"", final=True)
        self._buffer = ""
        if tail.endswith("\r"):
            tail = tail[:-1]
        return [tail] if tail else []


class EventAssembler:
    """
    Group lines into events.

    A blank line ends the event in progress. Multiple data lines are joined
    with a newline. Comment lines and lines without a colon are skipped.
    """

    def __init__(self):
        self._reset()

    def _reset(self) -> None:
        self._name: Optional[str] = None
        self._data: List[str] = []
        self._id: Optional[str] = None
        self._pending = False

    def _emit(self) -> Optional[SSEEvent]:
        if not self._pending:
            return None
        event = SSEEvent(name=self._name, data="\n".join(self._data), id=self._id)
        self._reset()
        return event

    def feed_line(self, line: str) -> List[SSEEvent]:
        """Process one line; returns the events it completed (zero, one or two)."""
        if not line.strip():
            event = self._emit()
            return [event] if event else []

        if line.startswith(SSE_COMMENT_PREFIX):
            # Keep-alive heartbeat
            logger.debug("SSE keep-alive received")
            return []

        if SSE_FIELD_SEPARATOR not in line:
            anomaly = FramingAnomaly(line)
            logger.debug(f"Ignoring line: {anomaly}")
            return []

        field, _, value = line.partition(SSE_FIELD_SEPARATOR)
        field = field.strip().lower()
        if value.startswith(" "):
            value = value[1:]

        completed: List[SSEEvent] = []
        if field == "event":
            # Server skipped the blank separator: close the previous event first
            if "\n".join(self._data):
                completed.append(self._emit())
            self._name = value.strip() or None
            self._pending = True
        elif field == "data":
            self._data.append(value)
            self._pending = True
        elif field == "id":
            self._id = value.strip() or None
            self._pending = True
        else:
            logger.debug(f"Ignoring unknown SSE field '{field}'")
        return completed

    def flush(self) -> Optional[SSEEvent]:
        """End of stream: emit whatever is still buffered."""
        return self._emit()


def iter_events(lines: Iterable[str]) -> Iterator[SSEEvent]:
    """Lazily assemble events from an iterable of lines."""
    assembler = EventAssembler()
    for line in lines:
        yield from assembler.feed_line(line)
    final = assembler.flush()
    if final is not None:
        yield final


async def aiter_events(lines: AsyncIterable[str]) -> AsyncIterator[SSEEvent]:
    """Lazily assemble events from an async iterable of lines."""
    assembler = EventAssembler()
    async for line in lines:
        for event in assembler.feed_line(line):
            yield event
    final = assembler.flush()
    if final is not None:
        yield final


async def aiter_lines(chunks: AsyncIterable[Union[bytes, str]]) -> AsyncIterator[str]:
    """Frame an async stream of raw chunks into lines."""
    framer = LineFramer()
    async for chunk in chunks:
        for line in framer.feed(chunk):
            yield line
    for line in framer.flush():
        yield line


def format_sse(event: Optional[str], data: str = "", id: Optional[str] = None) -> str:
    """Format one event in wire form (multi-line data becomes several data lines)"""
    lines = []
    if event:
        lines.append(f"event: {event}")
    if id:
        lines.append(f"id: {id}")
    for data_line in data.split("\n"):
        lines.append(f"data: {data_line}")
    return "\n".join(lines) + "\n\n"
