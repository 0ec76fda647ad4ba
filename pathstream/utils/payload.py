"""
JSON payload normalization for event handlers.

Event data arrives as text that is usually, but not always, JSON. Handlers
never poke at raw dicts: parse_payload() wraps the parsed value in a Payload,
a tagged tree (object/array/string/number/bool/null) whose accessors raise
DecodeError naming the offending key path instead of returning silent None.

Examples:
    >>> payload = parse_payload('{"content": "Hel", "is_streaming": true}')
    >>> payload.require_str("content")
    'Hel'
    >>> payload.optional_bool("is_streaming", default=True)
    True
    >>> parse_payload('{"type": "info"}').require_str("message")
    Traceback (most recent call last):
    DecodeError: message: missing required field
"""

import logging
from typing import Any, List, Optional, Union

import orjson

from pathstream.utils.exceptions import raise_decode_error

logger = logging.getLogger(__name__)

OBJECT = "object"
ARRAY = "array"
STRING = "string"
NUMBER = "number"
BOOL = "bool"
NULL = "null"


def _kind_of(value: Any) -> str:
    # bool before number: bool is an int subclass
    if value is None:
        return NULL
    if isinstance(value, bool):
        return BOOL
    if isinstance(value, (int, float)):
        return NUMBER
    if isinstance(value, str):
        return STRING
    if isinstance(value, list):
        return ARRAY
    if isinstance(value, dict):
        return OBJECT
    raise_decode_error(f"unsupported JSON value type {type(value).__name__}")


class Payload:
    """A parsed JSON value with explicit, fallible accessors."""

    __slots__ = ("raw", "kind", "path")

    def __init__(self, raw: Any, path: str = ""):
        self.raw = raw
        self.kind = _kind_of(raw)
        self.path = path

    def __repr__(self) -> str:
        return f"Payload(kind={self.kind!r}, path={self.path!r})"

    def _child_path(self, key: Union[str, int]) -> str:
        if isinstance(key, int):
            return f"{self.path}[{key}]"
        return f"{self.path}.{key}" if self.path else key

    def _expect(self, kind: str) -> None:
        if self.kind != kind:
            raise_decode_error(f"expected {kind}, got {self.kind}", path=self.path or None)

    # Container access

    def as_array(self) -> List["Payload"]:
        self._expect(ARRAY)
        return [Payload(value, self._child_path(idx)) for idx, value in enumerate(self.raw)]

    def get(self, key: str) -> Optional["Payload"]:
        """Child payload for `key`, or None when absent. Fails if not an object."""
        self._expect(OBJECT)
        if key not in self.raw:
            return None
        return Payload(self.raw[key], self._child_path(key))

    def require(self, key: str) -> "Payload":
        child = self.get(key)
        if child is None:
            raise_decode_error("missing required field", path=self._child_path(key))
        return child

    # Scalar access

    def as_str(self) -> str:
        self._expect(STRING)
        return self.raw

    def as_bool(self) -> bool:
        self._expect(BOOL)
        return self.raw

    def as_number(self) -> float:
        self._expect(NUMBER)
        return float(self.raw)

    def require_str(self, key: str) -> str:
        return self.require(key).as_str()

    def optional_str(self, key: str) -> Optional[str]:
        """String value for `key`; None when absent, null, or not a string."""
        child = self.get(key)
        if child is None or child.kind != STRING:
            return None
        return child.raw

    def optional_bool(self, key: str, default: bool) -> bool:
        """Bool value for `key`; `default` when absent, null, or not a bool."""
        child = self.get(key)
        if child is None or child.kind == NULL:
            return default
        if child.kind != BOOL:
            logger.debug(f"Ignoring non-bool {child.path}: {child.raw!r}")
            return default
        return child.as_bool()

    def is_object(self) -> bool:
        return self.kind == OBJECT

    def is_array(self) -> bool:
        return self.kind == ARRAY


def parse_payload(data: Union[str, bytes]) -> Payload:
    """
    Parse event data text into a Payload.

    Raises:
        DecodeError: if the text is empty or not valid JSON
    """
    if not data or not data.strip():
        raise_decode_error("empty payload")

    try:
        return Payload(orjson.loads(data))
    except orjson.JSONDecodeError as e:
        logger.debug(f"JSON parse error: {e}")
        raise_decode_error(f"invalid JSON: {e}")


def as_payload(value: Any) -> Payload:
    """Wrap an already-parsed value; pass Payload instances through."""
    if isinstance(value, Payload):
        return value
    if isinstance(value, (str, bytes)):
        return parse_payload(value)
    return Payload(value)
