"""
Event router for gateway streams.

Each logical stream gets its own router with the dispatch table of its
channel:

    chat:         notification, content, finish, map, interface
    orchestrator: map

Events are handled strictly in arrival order, one at a time. A payload that
fails to decode drops only that event's effect; the stream keeps draining.
"""

import logging
from enum import Enum
from typing import AsyncIterable, Callable, Dict, Optional

from pathstream.config import Settings, settings as default_settings
from pathstream.models.chat import NotificationData
from pathstream.models.sse import SSEEvent
from pathstream.services.context import ConversationContext
from pathstream.services.features import extract_features
from pathstream.services.signals import UISignal
from pathstream.utils.exceptions import DecodeError, EmptyResult, raise_empty_result
from pathstream.utils.payload import parse_payload

logger = logging.getLogger(__name__)


class Channel(str, Enum):
    CHAT = "chat"
    ORCHESTRATOR = "orchestrator"


# Event names each channel understands
CHANNEL_EVENTS: Dict[Channel, tuple[str, ...]] = {
    Channel.CHAT: ("notification", "content", "finish", "map", "interface"),
    Channel.ORCHESTRATOR: ("map",),
}


class EventRouter:
    """Applies the events of one stream to a ConversationContext."""

    def __init__(
        self,
        channel: Channel,
        context: ConversationContext,
        settings: Optional[Settings] = None,
    ):
        self.channel = channel
        self.context = context
        self.settings = settings or default_settings
        self.handled = 0
        self.dropped = 0

        handlers: Dict[str, Callable[[SSEEvent], None]] = {
            "notification": self._handle_notification,
            "content": self._handle_content,
            "finish": self._handle_finish,
            "map": self._handle_map,
            "interface": self._handle_interface,
        }
        self._handlers = {name: handlers[name] for name in CHANNEL_EVENTS[channel]}

    @property
    def event_names(self) -> tuple[str, ...]:
        return tuple(self._handlers)

    def dispatch(self, event: SSEEvent) -> bool:
        """
        Handle one event.

        Returns:
            True if the event had an effect, False if it was ignored or dropped
        """
        event_type = event.event_type
        handler = self._handlers.get(event_type) if event_type else None
        if handler is None:
            logger.warning(f"[{self.channel.value}] Unknown or unsupported event type: {event.name}")
            self.dropped += 1
            return False

        try:
            handler(event)
        except DecodeError as e:
            logger.warning(f"[{self.channel.value}] Dropping '{event_type}' event: {e}")
            self.dropped += 1
            return False
        except EmptyResult as e:
            logger.info(f"[{self.channel.value}] '{event_type}' event kept previous state: {e}")
            self.dropped += 1
            return False

        self.handled += 1
        return True

    async def drain(self, events: AsyncIterable[SSEEvent]) -> int:
        """Dispatch every event of a stream in order. Returns the number of events read."""
        count = 0
        async for event in events:
            count += 1
            logger.debug(f"[{self.channel.value}] SSE event #{count}: {event.name} {event.data[:100]!r}")
            self.dispatch(event)
        logger.info(
            f"[{self.channel.value}] Stream completed: {count} events, "
            f"{self.handled} handled, {self.dropped} dropped"
        )
        return count

    # =========================================================================
    # HANDLERS
    # =========================================================================

    def _handle_notification(self, event: SSEEvent) -> None:
        payload = parse_payload(event.data)
        notification = NotificationData(
            message=payload.require_str("message"),
            type=payload.optional_str("type"),
        )
        self.context.show_notification(notification)
        logger.debug(f"Notification received: type={notification.type}, message={notification.message}")

    def _handle_content(self, event: SSEEvent) -> None:
        payload = parse_payload(event.data)
        content = payload.require_str("content")
        is_streaming = payload.optional_bool("is_streaming", default=True)
        message = self.context.messages.append_chunk(content, is_streaming=is_streaming)
        logger.debug(f"Content chunk appended to {message.id} (length {len(message.text)})")

    def _handle_finish(self, event: SSEEvent) -> None:
        # Payload (including any is_streaming flag) is ignored: finish always finalizes
        self.context.messages.finish()

    def _handle_map(self, event: SSEEvent) -> None:
        features = extract_features(parse_payload(event.data))
        if not features:
            raise_empty_result("no usable features in map payload")
        self.context.apply_features(features)
        self.context.signals.dismiss_keyboard.fire()
        logger.debug(f"[{self.channel.value}] Routed map with {len(features)} features")

    def _handle_interface(self, event: SSEEvent) -> None:
        payload = parse_payload(event.data)
        message = payload.require_str("message")
        if message.lower() == self.settings.reveal_detail_command.lower():
            self.context.signals.emit(UISignal.REVEAL_DETAIL_PANEL)
        else:
            logger.debug(f"Interface message has no action: '{message}'")
