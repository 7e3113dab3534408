"""Hex keypad latch."""

from typing import Optional

from .errors import InvalidKeyIndex

NUM_KEYS = 16


class Keypad:
    """Sixteen key states, written by the frontend, read by the executor."""

    def __init__(self):
        self._keys: list[bool] = [False] * NUM_KEYS

    def _check_index(self, index: int) -> None:
        if not 0 <= index < NUM_KEYS:
            raise InvalidKeyIndex(f"Key index out of range: {index}")

    def set(self, index: int, pressed: bool) -> None:
        self._check_index(index)
        self._keys[index] = bool(pressed)

    def is_pressed(self, index: int) -> bool:
        self._check_index(index)
        return self._keys[index]

    def first_pressed(self) -> Optional[int]:
        """Lowest pressed key index, or None."""
        for index, pressed in enumerate(self._keys):
            if pressed:
                return index
        return None

    def snapshot(self) -> list[bool]:
        return list(self._keys)

    def reset(self) -> None:
        self._keys = [False] * NUM_KEYS
