"""64x32 monochrome framebuffer."""

from typing import Sequence

import numpy as np

from .constants import DISPLAY_H, DISPLAY_W, SPRITE_WIDTH


class DisplayBuffer:
    """Boolean pixel grid indexed as [y, x].

    The buffer is only mutated by clear() and draw_sprite(); both raise the
    redraw flag, which the renderer reads back with consume_redraw().
    """

    def __init__(self, width: int = DISPLAY_W, height: int = DISPLAY_H):
        self.width = width
        self.height = height
        self._pixels = np.zeros((height, width), dtype=np.bool_)
        self._redraw = True

    @property
    def pixels(self) -> np.ndarray:
        """Read-only view of the current frame"""
        view = self._pixels.view()
        view.flags.writeable = False
        return view

    def snapshot(self) -> np.ndarray:
        return self._pixels.copy()

    def consume_redraw(self) -> bool:
        """Return whether the frame changed since the last call, then reset"""
        pending = self._redraw
        self._redraw = False
        return pending

    def clear(self):
        self._pixels.fill(False)
        self._redraw = True

    def draw_sprite(self, x: int, y: int, rows: Sequence[int], clip: bool = False) -> bool:
        """XOR an 8-pixel-wide sprite onto the screen at (x, y).

        The start position always wraps. Pixels running past the right or
        bottom edge wrap around as well, unless clip is set, in which case
        they are dropped.

        Returns:
            True if any pixel went from set to unset
        """
        x %= self.width
        y %= self.height
        collision = False

        for row, sprite_byte in enumerate(rows):
            py = y + row
            if py >= self.height:
                if clip:
                    break
                py %= self.height

            for col in range(SPRITE_WIDTH):
                if not sprite_byte & (0x80 >> col):
                    continue

                px = x + col
                if px >= self.width:
                    if clip:
                        break
                    px %= self.width

                if self._pixels[py, px]:
                    collision = True
                self._pixels[py, px] ^= True

        self._redraw = True
        return collision

    def __str__(self):
        return "\n".join(
            "".join("█" if on else "." for on in row) for row in self._pixels
        )
