"""
Streaming message accumulator.

Turns a turn's `content` / `finish` events into one assistant message that is
updated in place:

    NoActiveTurn --content--> Streaming --content--> Streaming
    Streaming --finish--> Finished (message kept, is_streaming=False)
                       or NoActiveTurn (blank message dropped)
    NoActiveTurn --finish--> NoActiveTurn (no-op)
"""

import logging
from enum import Enum
from typing import List, Optional, Tuple

from pathstream.models.chat import ChatMessage

logger = logging.getLogger(__name__)


class TurnState(str, Enum):
    NO_ACTIVE_TURN = "no_active_turn"
    STREAMING = "streaming"
    FINISHED = "finished"


class MessageAccumulator:
    """Owns the ordered message list of one conversation."""

    def __init__(self):
        self._messages: List[ChatMessage] = []
        self._state = TurnState.NO_ACTIVE_TURN

    @property
    def messages(self) -> Tuple[ChatMessage, ...]:
        return tuple(self._messages)

    @property
    def state(self) -> TurnState:
        return self._state

    @property
    def active_message(self) -> Optional[ChatMessage]:
        """The unfinished assistant message, if the last message is one."""
        if not self._messages:
            return None
        last = self._messages[-1]
        if last.is_user or not last.is_streaming:
            return None
        return last

    def __len__(self) -> int:
        return len(self._messages)

    def add_user_message(self, text: str) -> ChatMessage:
        message = ChatMessage.user(text)
        self._messages.append(message)
        self._state = TurnState.NO_ACTIVE_TURN
        return message

    def append_chunk(self, content: str, is_streaming: bool = True) -> ChatMessage:
        """Append a content chunk, opening a new assistant message if needed."""
        message = self.active_message
        if message is None:
            message = ChatMessage.assistant_placeholder()
            self._messages.append(message)
            logger.debug(f"Opened assistant message {message.id}")

        message.append(content)
        message.is_streaming = is_streaming
        self._state = TurnState.STREAMING if is_streaming else TurnState.FINISHED
        return message

    def finish(self) -> Optional[ChatMessage]:
        """
        Close the current turn.

        Returns the finalized message, or None when the message was blank and
        got dropped or there was no unfinished assistant message.
        """
        message = self.active_message
        if message is None:
            logger.debug("No assistant message to finish")
            return None

        if message.is_blank():
            self._messages.pop()
            self._state = TurnState.NO_ACTIVE_TURN
            logger.debug(f"Dropped empty assistant message {message.id}")
            return None

        message.is_streaming = False
        self._state = TurnState.FINISHED
        return message

    def close_turn(self) -> Optional[ChatMessage]:
        """Stream ended (done, failed or superseded): make sure nothing is left streaming."""
        if self.active_message is None:
            return None
        logger.debug("Stream ended before finish; finalizing assistant message")
        return self.finish()
