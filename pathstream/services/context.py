"""Per-conversation state that stream routers write to."""

import logging
from typing import Optional

from pathstream.config import Settings, settings as default_settings
from pathstream.models.chat import NotificationData
from pathstream.models.geo import FeatureSet, PointFeature
from pathstream.services.accumulator import MessageAccumulator
from pathstream.services.signals import UISignals

logger = logging.getLogger(__name__)


class ConversationContext:
    """
    Mutable state owned by one conversation.

    Routers are the only writers and apply each event synchronously, so no
    locking is needed as long as events are dispatched one at a time.
    """

    def __init__(self, settings: Optional[Settings] = None):
        settings = settings or default_settings
        self.messages = MessageAccumulator()
        self.notification: Optional[NotificationData] = None
        self.features = FeatureSet()
        self.signals = UISignals(keyboard_pulse_seconds=settings.keyboard_pulse_seconds)

    def show_notification(self, notification: NotificationData) -> None:
        # Last writer wins
        self.notification = notification

    def apply_features(self, features: list[PointFeature]) -> str:
        revision = self.features.replace(features)
        logger.debug(f"Feature set updated with {len(features)} features (revision {revision})")
        return revision

    def close(self) -> None:
        self.signals.close()
