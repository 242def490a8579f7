"""Delay and sound countdown timers."""


class Timers:
    """Two 8-bit counters decremented at 60Hz until they reach zero.

    The sound timer drives the beeper: sound is on while it is nonzero.
    """

    def __init__(self):
        self.delay = 0
        self.sound = 0

    def reset(self):
        self.delay = 0
        self.sound = 0

    def tick(self):
        """Decrement timers (call at 60Hz)"""
        if self.delay > 0:
            self.delay -= 1

        if self.sound > 0:
            self.sound -= 1

    @property
    def sound_active(self) -> bool:
        return self.sound > 0
