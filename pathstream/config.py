import logging
import sys

from pydantic_settings import BaseSettings
from typing import Optional


def setup_logging():
    """Configure application logging."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )
    # Set third-party loggers to WARNING to reduce noise
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


# Initialize logging on import
setup_logging()

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    # Gateway connection
    gateway_base_url: str = "http://localhost:8000"
    access_token: Optional[str] = None

    # Streaming endpoints
    chat_endpoint: str = "/v1/ask"
    orchestrator_endpoint: str = "/v1/orchestrator"

    # Timeout settings (seconds). No read timeout: progress streams can be
    # silent for a long time between notifications.
    connect_timeout: float = 30.0
    read_timeout: Optional[float] = None

    # Sent with every chat message
    device_lang: str = "en"

    # UI signals
    keyboard_pulse_seconds: float = 0.1
    reveal_detail_command: str = "show info sheet"

    debug: bool = False

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


settings = Settings()

if settings.debug:
    logging.getLogger("pathstream").setLevel(logging.DEBUG)
