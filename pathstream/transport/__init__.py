from pathstream.transport.gateway import GatewayClient
from pathstream.transport.registry import StreamRegistry

__all__ = ["GatewayClient", "StreamRegistry"]
