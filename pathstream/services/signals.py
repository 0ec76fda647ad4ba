"""
Transient UI signals emitted by stream handlers.

Some signals are one-shot (reveal the detail panel); others are "pulses": a
flag that is briefly true and then resets by itself, e.g. asking the UI to
dismiss the keyboard when new map data arrives. Pulses reset through a
cancellable loop timer; cancelling before it fires is harmless because the
flag's meaning is purely transient.
"""

import asyncio
import logging
from collections import defaultdict
from enum import Enum
from typing import Callable, Dict, List, Optional

logger = logging.getLogger(__name__)

Listener = Callable[[], None]


class UISignal(str, Enum):
    DISMISS_KEYBOARD = "dismiss_keyboard"
    REVEAL_DETAIL_PANEL = "reveal_detail_panel"


class Pulse:
    """Flag that is set by fire() and cleared again after `duration` seconds."""

    def __init__(self, name: str, duration: float, on_fire: Optional[Listener] = None):
        self.name = name
        self.duration = duration
        self.active = False
        self.fire_count = 0
        self._on_fire = on_fire
        self._reset_handle: Optional[asyncio.TimerHandle] = None

    def fire(self) -> None:
        self.cancel()
        self.active = True
        self.fire_count += 1
        if self._on_fire is not None:
            self._on_fire()

        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            # No loop to schedule on: nobody can observe the flag anyway
            self._reset()
            return
        self._reset_handle = loop.call_later(self.duration, self._reset)

    def cancel(self) -> None:
        """Drop a pending reset (the flag keeps its current value)."""
        if self._reset_handle is not None:
            self._reset_handle.cancel()
            self._reset_handle = None

    def _reset(self) -> None:
        self._reset_handle = None
        self.active = False
        logger.debug(f"Pulse '{self.name}' reset")


class UISignals:
    """Listener registry for the signals the consuming UI layer reacts to."""

    def __init__(self, keyboard_pulse_seconds: float = 0.1):
        self._listeners: Dict[UISignal, List[Listener]] = defaultdict(list)
        self.counts: Dict[UISignal, int] = defaultdict(int)
        self.dismiss_keyboard = Pulse(
            UISignal.DISMISS_KEYBOARD.value,
            keyboard_pulse_seconds,
            on_fire=lambda: self.emit(UISignal.DISMISS_KEYBOARD),
        )

    def connect(self, signal: UISignal, listener: Listener) -> None:
        self._listeners[signal].append(listener)

    def disconnect(self, signal: UISignal, listener: Listener) -> None:
        if listener in self._listeners[signal]:
            self._listeners[signal].remove(listener)

    def emit(self, signal: UISignal) -> None:
        self.counts[signal] += 1
        for listener in list(self._listeners[signal]):
            try:
                listener()
            except Exception:
                logger.exception(f"UI listener for '{signal.value}' failed")

    def close(self) -> None:
        self.dismiss_keyboard.cancel()
        self._listeners.clear()
