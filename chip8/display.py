"""Monochrome framebuffer for the CHIP-8 virtual machine."""

from typing import Iterable

SCREEN_WIDTH = 64
SCREEN_HEIGHT = 32


class Display:
    """64x32 row-major bitmap, mutated only by CLS and DRW."""

    def __init__(self, width: int = SCREEN_WIDTH, height: int = SCREEN_HEIGHT):
        self.width = width
        self.height = height
        self._cells: list[bool] = [False] * (width * height)

    def clear(self) -> None:
        self._cells = [False] * (self.width * self.height)

    def get(self, x: int, y: int) -> bool:
        return self._cells[(y % self.height) * self.width + (x % self.width)]

    def draw_sprite(self, x: int, y: int, rows: Iterable[int]) -> bool:
        """XOR an 8-pixel-wide sprite at (x, y), wrapping at the edges.

        Returns True if any lit cell was turned off.
        """
        collision = False
        for row, bits in enumerate(rows):
            py = (y + row) % self.height
            for col in range(8):
                if bits & (0x80 >> col):
                    idx = py * self.width + (x + col) % self.width
                    collision |= self._cells[idx]
                    self._cells[idx] = not self._cells[idx]
        return collision

    def pixels(self) -> tuple[bool, ...]:
        """Flat row-major copy of the framebuffer."""
        return tuple(self._cells)

    def rows(self) -> tuple[tuple[bool, ...], ...]:
        w = self.width
        return tuple(tuple(self._cells[r * w:(r + 1) * w]) for r in range(self.height))

    def lit_count(self) -> int:
        return sum(self._cells)

    def render_text(self, on: str = "#", off: str = ".") -> list[str]:
        """Render each row as a string, for traces and API responses."""
        return ["".join(on if c else off for c in row) for row in self.rows()]
