from pathstream.utils.sse import EventAssembler, LineFramer, format_sse
from pathstream.utils.payload import Payload, parse_payload

__all__ = ["EventAssembler", "LineFramer", "format_sse", "Payload", "parse_payload"]
