"""Delay and sound timers."""

import logging
from typing import Callable, Optional

logger = logging.getLogger(__name__)


class Timers:
    """Two 8-bit counters decremented once per timer tick (60 Hz)."""

    def __init__(self, on_sound_end: Optional[Callable[[], None]] = None):
        self.delay: int = 0
        self.sound: int = 0
        self.on_sound_end = on_sound_end

    @property
    def sound_active(self) -> bool:
        return self.sound > 0

    def set_delay(self, value: int) -> None:
        self.delay = value & 0xFF

    def set_sound(self, value: int) -> None:
        self.sound = value & 0xFF

    def tick(self) -> None:
        if self.delay > 0:
            self.delay -= 1

        if self.sound > 0:
            self.sound -= 1
            if self.sound == 0:
                logger.debug("Sound timer expired")
                if self.on_sound_end is not None:
                    self.on_sound_end()

    def reset(self) -> None:
        self.delay = 0
        self.sound = 0
