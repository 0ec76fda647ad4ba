from pydantic import BaseModel, Field
from typing import Any, Dict, Optional, Union

from pathstream.utils.time import local_timezone_name, utc_iso

# The gateway expects "" rather than null when a location is unknown
LocationDetails = Union[Dict[str, Any], str]


class ChatRequest(BaseModel):
    """Body of a /v1/ask chat request"""
    message: str = Field(..., min_length=1)
    msg_utc: str = Field(default_factory=utc_iso)
    msg_timezone: Optional[str] = Field(default_factory=local_timezone_name)
    device_lang: Optional[str] = None
    last_device_location: LocationDetails = ""
    last_lookup_location: LocationDetails = ""

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "message": "What's the history of this place?",
                    "msg_utc": "2025-09-09T12:00:00Z",
                    "msg_timezone": "Europe/Rome",
                    "device_lang": "en",
                    "last_device_location": {"lat": 41.89, "lon": 12.49},
                    "last_lookup_location": "",
                }
            ]
        }
    }


class UserEvent(BaseModel):
    """Body of a /v1/orchestrator request (location and app events)"""
    evt_utc: str
    evt_timezone: Optional[str] = None
    evt_type: str
    evt_data: Dict[str, Any] = Field(default_factory=dict)
    session_id: Optional[str] = None

    @classmethod
    def build(
        cls,
        evt_type: str,
        evt_data: Dict[str, Any],
        session_id: Optional[str] = None,
    ) -> "UserEvent":
        """Create an event stamped with the current UTC time and local timezone."""
        return cls(
            evt_utc=utc_iso(),
            evt_timezone=local_timezone_name(),
            evt_type=evt_type,
            evt_data=evt_data,
            session_id=session_id,
        )
