import logging
from typing import Any, AsyncIterator, Dict, Optional

import httpx
import orjson

from pathstream.config import Settings, settings as default_settings
from pathstream.models.sse import SSEEvent
from pathstream.utils.exceptions import TransportError, raise_transport_error
from pathstream.utils.sse import aiter_events, aiter_lines

logger = logging.getLogger(__name__)

# Constants
SSE_MEDIA_TYPE = "text/event-stream"


class GatewayClient:
    """Streaming client for the gateway's SSE endpoints"""

    def __init__(
        self,
        base_url: Optional[str] = None,
        access_token: Optional[str] = None,
        settings: Optional[Settings] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.settings = settings or default_settings
        self.base_url = (base_url or self.settings.gateway_base_url).rstrip("/")
        self.access_token = access_token if access_token is not None else self.settings.access_token

        # Build headers (Authorization is optional for local gateways)
        headers = {"Content-Type": "application/json"}
        if self.access_token:
            headers["Authorization"] = f"Bearer {self.access_token}"

        self._client: Optional[httpx.AsyncClient] = httpx.AsyncClient(
            base_url=self.base_url,
            headers=headers,
            timeout=self.timeout,
            transport=transport,
        )

    @property
    def timeout(self) -> httpx.Timeout:
        """Connect timeout from settings; reads may block as long as the stream lives."""
        return httpx.Timeout(
            self.settings.connect_timeout,
            connect=self.settings.connect_timeout,
            read=self.settings.read_timeout,
        )

    async def stream(
        self, endpoint: str, body: Optional[Dict[str, Any]] = None
    ) -> AsyncIterator[SSEEvent]:
        """
        POST a JSON body and yield the decoded events of the response stream.

        Raises:
            TransportError: on connection failure, non-200 status, or a
                connection that breaks mid-stream (raised once, no retries)
        """
        if self._client is None:
            raise_transport_error("Gateway client is closed")

        logger.info(f"API Request: POST {self.base_url}{endpoint}")
        try:
            async with self._client.stream(
                "POST",
                endpoint,
                content=orjson.dumps(body or {}),
                headers={"Accept": SSE_MEDIA_TYPE},
            ) as response:
                if response.status_code != 200:
                    error_body = await response.aread()
                    error_msg = self._extract_error_message(error_body)
                    logger.error(
                        f"Gateway error from '{endpoint}': "
                        f"status={response.status_code}, error={error_msg}"
                    )
                    raise_transport_error(error_msg, status_code=response.status_code)

                async for event in aiter_events(aiter_lines(response.aiter_bytes())):
                    yield event

        except httpx.HTTPError as e:
            logger.error(f"Stream from '{endpoint}' failed: {e!r}")
            raise TransportError(f"Connection to {endpoint} failed: {e}") from e

        logger.info(f"SSE stream from '{endpoint}' completed")

    @staticmethod
    def _extract_error_message(error_body: bytes) -> str:
        """Pull a readable message out of an error response body."""
        try:
            error_json = orjson.loads(error_body)
        except orjson.JSONDecodeError:
            return error_body.decode("utf-8", errors="replace") or "empty response"

        if isinstance(error_json, dict):
            error = error_json.get("error")
            if isinstance(error, dict) and isinstance(error.get("message"), str):
                return error["message"]
            if isinstance(error_json.get("detail"), str):
                return error_json["detail"]
            if isinstance(error_json.get("message"), str):
                return error_json["message"]
        return error_body.decode("utf-8", errors="replace")

    async def aclose(self):
        """Cleanup HTTP client resources."""
        if self._client:
            await self._client.aclose()
            self._client = None
