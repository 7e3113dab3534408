"""Monochrome framebuffer for the CHIP-8 core."""

SCREEN_WIDTH = 64
SCREEN_HEIGHT = 32


class Display:
    """64x32 pixel grid stored row-major (index = x + width * y)."""

    def __init__(self, width: int = SCREEN_WIDTH, height: int = SCREEN_HEIGHT):
        self.width = width
        self.height = height
        self._pixels: list[bool] = [False] * (width * height)

    def clear(self) -> None:
        self._pixels = [False] * (self.width * self.height)

    def pixel(self, x: int, y: int) -> bool:
        return self._pixels[(x % self.width) + self.width * (y % self.height)]

    def draw_sprite(self, x: int, y: int, rows: bytes) -> bool:
        """XOR sprite rows onto the screen at (x, y), MSB leftmost.

        Coordinates wrap around both edges. Returns True if any set pixel
        was turned off.
        """
        collision = False
        for row, bits in enumerate(rows):
            py = (y + row) % self.height
            for col in range(8):
                if bits & (0x80 >> col):
                    px = (x + col) % self.width
                    idx = px + self.width * py
                    collision |= self._pixels[idx]
                    self._pixels[idx] = not self._pixels[idx]
        return collision

    def view(self) -> tuple[bool, ...]:
        """Read-only copy of the pixel grid."""
        return tuple(self._pixels)

    def rows(self, on: str = "#", off: str = ".") -> list[str]:
        """Render the grid as text, one string per row."""
        lines = []
        for idx in range(0, len(self._pixels), self.width):
            lines.append("".join(
                on if lit else off for lit in self._pixels[idx:idx + self.width]
            ))
        return lines
