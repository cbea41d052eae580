"""Hex keypad input state."""

from typing import Optional
from .errors import InvalidKey

NUM_KEYS = 16

# Conventional layout: left block of a QWERTY keyboard onto the 4x4 keypad.
#   1 2 3 4        1 2 3 C
#   Q W E R   ->   4 5 6 D
#   A S D F        7 8 9 E
#   Z X C V        A 0 B F
KEYMAP: dict[str, int] = {
    "1": 0x1, "2": 0x2, "3": 0x3, "4": 0xC,
    "q": 0x4, "w": 0x5, "e": 0x6, "r": 0xD,
    "a": 0x7, "s": 0x8, "d": 0x9, "f": 0xE,
    "z": 0xA, "x": 0x0, "c": 0xB, "v": 0xF,
}


def key_for(char: str) -> Optional[int]:
    """Map a physical keyboard character to its keypad index, if any."""
    return KEYMAP.get(char.lower())


class Keypad:
    """Pressed/released flags for keys 0x0-0xF."""

    def __init__(self):
        self._pressed: list[bool] = [False] * NUM_KEYS

    def _check(self, key: int) -> None:
        if key < 0 or key >= NUM_KEYS:
            raise InvalidKey(f"Key index out of range: {key}")

    def set(self, key: int, pressed: bool) -> None:
        self._check(key)
        self._pressed[key] = pressed

    def is_pressed(self, key: int) -> bool:
        self._check(key)
        return self._pressed[key]

    def first_pressed(self) -> Optional[int]:
        """Lowest pressed key index, or None if no key is down."""
        for key, pressed in enumerate(self._pressed):
            if pressed:
                return key
        return None

    def pressed_keys(self) -> list[int]:
        return [k for k, p in enumerate(self._pressed) if p]
