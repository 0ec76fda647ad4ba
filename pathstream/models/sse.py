from pydantic import BaseModel, ConfigDict
from typing import Optional


class SSEEvent(BaseModel):
    """One decoded server-sent event"""

    model_config = ConfigDict(frozen=True)

    name: Optional[str] = None  # "content", "finish", "map", ... (None for data-only events)
    data: str = ""
    id: Optional[str] = None

    @property
    def event_type(self) -> Optional[str]:
        """Lowercased event name used for dispatch."""
        return self.name.lower() if self.name else None
