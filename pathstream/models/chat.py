"""
Chat state records.

ChatMessage is mutable: an assistant message is created once per turn and
then grows in place as content chunks arrive, keeping its id.
"""

import uuid
from dataclasses import dataclass, field
from typing import List, Optional

from pydantic import BaseModel, ConfigDict


@dataclass(eq=False)
class ChatMessage:
    """One chat bubble. Assistant text is accumulated from streamed chunks."""

    is_user: bool
    is_streaming: bool = False
    id: str = field(default_factory=lambda: uuid.uuid4().hex)
    _chunks: List[str] = field(default_factory=list, init=False, repr=False)
    _text: Optional[str] = field(default="", init=False, repr=False)

    @classmethod
    def user(cls, text: str) -> "ChatMessage":
        message = cls(is_user=True, is_streaming=False)
        message.append(text)
        return message

    @classmethod
    def assistant_placeholder(cls) -> "ChatMessage":
        return cls(is_user=False, is_streaming=True)

    @property
    def text(self) -> str:
        # Joined lazily so each append stays O(1)
        if self._text is None:
            self._text = "".join(self._chunks)
            self._chunks = [self._text] if self._text else []
        return self._text

    def append(self, chunk: str) -> None:
        if chunk:
            self._chunks.append(chunk)
            self._text = None

    def is_blank(self) -> bool:
        return not self.text.strip()


class NotificationData(BaseModel):
    """Banner notification pushed by the server"""

    model_config = ConfigDict(frozen=True)

    type: Optional[str] = None  # "info", "search", "warning", ... (None = default icon)
    message: str
