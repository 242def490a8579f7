"""Hex keypad state."""

from typing import List, Optional

from .constants import NUM_KEYS


class Keypad:
    """Sixteen keys, 0x0-0xF.

    Besides the live key states the keypad remembers the first key that went
    from released to pressed since begin_wait(), which is what FX0A waits on.
    """

    def __init__(self):
        self.keys: List[bool] = [False] * NUM_KEYS
        self._waiting = False
        self._pressed_during_wait: Optional[int] = None

    def reset(self):
        self.keys = [False] * NUM_KEYS
        self._waiting = False
        self._pressed_during_wait = None

    def press(self, key: int):
        """Handle key press; codes outside 0-15 are ignored"""
        if not 0 <= key < NUM_KEYS:
            return
        if not self.keys[key] and self._waiting and self._pressed_during_wait is None:
            self._pressed_during_wait = key
        self.keys[key] = True

    def release(self, key: int):
        """Handle key release; codes outside 0-15 are ignored"""
        if 0 <= key < NUM_KEYS:
            self.keys[key] = False

    def is_pressed(self, key: int) -> bool:
        """Values outside 0-15 name no key and are never pressed"""
        return 0 <= key < NUM_KEYS and self.keys[key]

    def begin_wait(self):
        """Start listening for a fresh key press"""
        self._waiting = True
        self._pressed_during_wait = None

    def take_pressed(self) -> Optional[int]:
        """Return the key pressed since begin_wait() and stop listening"""
        key = self._pressed_during_wait
        if key is not None:
            self._waiting = False
            self._pressed_during_wait = None
        return key
