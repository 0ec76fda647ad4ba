"""
Conversation service: ties user actions to gateway streams.

send_message():  user text -> /v1/ask chat stream -> chat router
push_event():    app/location event -> /v1/orchestrator stream -> orchestrator router

Each channel has at most one live stream. Sending a new message cancels the
previous chat stream before the new one starts; the superseded call returns
False. Connection failures surface to the caller as TransportError, once.
"""

import logging
from typing import Any, Dict, Optional

from pathstream.config import Settings, settings as default_settings
from pathstream.models.request import ChatRequest, LocationDetails, UserEvent
from pathstream.services.context import ConversationContext
from pathstream.services.router import Channel, EventRouter
from pathstream.transport.gateway import GatewayClient
from pathstream.transport.registry import StreamRegistry
from pathstream.utils.exceptions import TransportError

logger = logging.getLogger(__name__)


class ConversationService:
    """Runs chat and orchestration streams against one ConversationContext."""

    def __init__(
        self,
        client: GatewayClient,
        context: Optional[ConversationContext] = None,
        registry: Optional[StreamRegistry] = None,
        settings: Optional[Settings] = None,
    ):
        self.settings = settings or default_settings
        self.client = client
        self.context = context or ConversationContext(self.settings)
        self.registry = registry or StreamRegistry()

    async def send_message(
        self,
        text: str,
        device_location: Optional[Dict[str, Any]] = None,
        lookup_location: Optional[Dict[str, Any]] = None,
    ) -> bool:
        """
        Send a chat message and stream the assistant's reply into the context.

        Returns:
            True when the reply stream completed, False when the text was
            empty or a newer message superseded this one

        Raises:
            TransportError: if the connection fails or drops
        """
        trimmed = text.strip()
        if not trimmed:
            logger.warning("send_message: message is empty after trimming, not sending")
            return False

        request = ChatRequest(
            message=trimmed,
            device_lang=self.settings.device_lang,
            last_device_location=self._location_or_blank(device_location),
            last_lookup_location=self._location_or_blank(lookup_location),
        )
        # The user message is added once the previous turn has been closed
        return await self.registry.run(
            Channel.CHAT.value,
            self._consume(Channel.CHAT, self.settings.chat_endpoint, request.model_dump(exclude_none=True)),
            on_claim=lambda: self.context.messages.add_user_message(trimmed),
        )

    async def push_event(
        self,
        evt_type: str,
        evt_data: Dict[str, Any],
        session_id: Optional[str] = None,
    ) -> bool:
        """
        Send an app event (e.g. a location update) to the orchestrator and
        apply the streamed map updates.

        Returns:
            True when the stream completed, False when superseded

        Raises:
            TransportError: if the connection fails or drops
        """
        event = UserEvent.build(evt_type, evt_data, session_id=session_id)
        return await self.registry.run(
            Channel.ORCHESTRATOR.value,
            self._consume(
                Channel.ORCHESTRATOR,
                self.settings.orchestrator_endpoint,
                event.model_dump(exclude_none=True),
            ),
        )

    async def _consume(self, channel: Channel, endpoint: str, body: Dict[str, Any]) -> int:
        router = EventRouter(channel, self.context, self.settings)
        events = self.client.stream(endpoint, body)
        try:
            return await router.drain(events)
        except TransportError as e:
            logger.error(f"[{channel.value}] Stream failed: {e}")
            raise
        finally:
            # Releases the HTTP response when the task was cancelled mid-stream
            await events.aclose()
            if channel is Channel.CHAT:
                # No message may stay streaming once its stream is gone
                self.context.messages.close_turn()

    @staticmethod
    def _location_or_blank(location: Optional[Dict[str, Any]]) -> LocationDetails:
        return location if location else ""

    async def aclose(self):
        """Cancel running streams and release the HTTP client."""
        await self.registry.cleanup()
        await self.client.aclose()
        self.context.close()
