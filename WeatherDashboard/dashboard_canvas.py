"""Canvas abstraction for the dashboard - a terminal text grid or a PNG image."""
import logging
from abc import ABC, abstractmethod
from typing import List, Tuple

from PIL import Image, ImageDraw, ImageFont

BACKGROUND = (15, 23, 42)


class DashboardCanvas(ABC):
    """
    Abstract canvas addressed in character cells.

    Layout code only knows cells; each backend decides how big a cell is.
    """

    @property
    @abstractmethod
    def width(self) -> int:
        """Get canvas width in cells."""
        pass

    @property
    @abstractmethod
    def height(self) -> int:
        """Get canvas height in cells."""
        pass

    @abstractmethod
    def clear(self) -> None:
        """Clear the entire canvas."""
        pass

    @abstractmethod
    def draw_text(self, x: int, y: int, text: str, r: int, g: int, b: int) -> None:
        """
        Draw a single line of text starting at a cell.

        Args:
            x: Column (0-based)
            y: Row (0-based)
            text: Text to draw; anything past the right edge is clipped
            r: Red component (0-255)
            g: Green component (0-255)
            b: Blue component (0-255)
        """
        pass

    @abstractmethod
    def draw_box(self, x: int, y: int, width: int, height: int, r: int, g: int, b: int) -> None:
        """Draw a rectangular outline covering width x height cells."""
        pass

    def draw_button(self, x: int, y: int, width: int, label: str) -> None:
        text = f"[ {label} ]"
        self.draw_text(x + max(0, (width - len(text)) // 2), y, text, 255, 255, 255)

    def draw_icon(self, x: int, y: int, code: str, url: str) -> None:
        self.draw_text(x, y, f"[{code}]", 255, 255, 255)

    def draw_spinner(self, x: int, y: int) -> None:
        self.draw_text(x, y, "(~)", 200, 200, 200)

    def draw_warning(self, x: int, y: int) -> None:
        self.draw_text(x, y, "/!\\", 252, 165, 165)


class TextCanvas(DashboardCanvas):
    """
    Character grid canvas for terminals and tests.

    Colors are ignored; one cell holds one character.
    """

    def __init__(self, width: int = 80, height: int = 24):
        self._width = width
        self._height = height
        self._cells = self._blank()

    def _blank(self) -> List[List[str]]:
        return [[" " for _ in range(self._width)] for _ in range(self._height)]

    @property
    def width(self) -> int:
        return self._width

    @property
    def height(self) -> int:
        return self._height

    def clear(self) -> None:
        self._cells = self._blank()

    def set_char(self, x: int, y: int, char: str) -> None:
        if 0 <= x < self._width and 0 <= y < self._height:
            self._cells[y][x] = char

    def get_char(self, x: int, y: int) -> str:
        if 0 <= x < self._width and 0 <= y < self._height:
            return self._cells[y][x]
        return " "

    def draw_text(self, x: int, y: int, text: str, r: int, g: int, b: int) -> None:
        for i, char in enumerate(text):
            self.set_char(x + i, y, char)

    def draw_box(self, x: int, y: int, width: int, height: int, r: int, g: int, b: int) -> None:
        if width < 2 or height < 2:
            return
        right = x + width - 1
        bottom = y + height - 1
        for col in range(x + 1, right):
            self.set_char(col, y, "-")
            self.set_char(col, bottom, "-")
        for row in range(y + 1, bottom):
            self.set_char(x, row, "|")
            self.set_char(right, row, "|")
        for corner_x, corner_y in ((x, y), (right, y), (x, bottom), (right, bottom)):
            self.set_char(corner_x, corner_y, "+")

    def to_text(self) -> str:
        """Render the grid as lines, trailing spaces stripped."""
        return "\n".join("".join(row).rstrip() for row in self._cells)


class PILCanvas(DashboardCanvas):
    """
    PIL-based canvas for rendering the dashboard to PNG images.

    Each cell maps to cell_width x cell_height pixels.
    """

    def __init__(self, width: int, height: int, cell_width: int = 8, cell_height: int = 16):
        """
        Initialize PIL canvas.

        Args:
            width: Canvas width in cells
            height: Canvas height in cells
            cell_width: Pixels per cell, horizontally
            cell_height: Pixels per cell, vertically
        """
        self._width = width
        self._height = height
        self.cell_width = cell_width
        self.cell_height = cell_height
        self._font = ImageFont.load_default()
        self.clear()

    @property
    def width(self) -> int:
        return self._width

    @property
    def height(self) -> int:
        return self._height

    @property
    def pixel_size(self) -> Tuple[int, int]:
        return self._width * self.cell_width, self._height * self.cell_height

    def _px(self, x: int, y: int) -> Tuple[int, int]:
        return x * self.cell_width, y * self.cell_height

    def clear(self) -> None:
        self._image = Image.new("RGB", self.pixel_size, BACKGROUND)
        self._draw = ImageDraw.Draw(self._image)

    def draw_text(self, x: int, y: int, text: str, r: int, g: int, b: int) -> None:
        self._draw.text(self._px(x, y), text, fill=(r, g, b), font=self._font)

    def draw_box(self, x: int, y: int, width: int, height: int, r: int, g: int, b: int) -> None:
        left, top = self._px(x, y)
        right, bottom = self._px(x + width, y + height)
        half_w, half_h = self.cell_width // 2, self.cell_height // 2
        self._draw.rounded_rectangle(
            (left + half_w, top + half_h, right - half_w, bottom - half_h),
            radius=6,
            outline=(r, g, b),
        )

    def draw_button(self, x: int, y: int, width: int, label: str) -> None:
        left, top = self._px(x, y)
        right, bottom = self._px(x + width, y + 1)
        self._draw.rounded_rectangle((left, top, right, bottom), radius=4, fill=(40, 50, 70))
        self.draw_text(x + max(0, (width - len(label)) // 2), y, label, 255, 255, 255)

    def draw_icon(self, x: int, y: int, code: str, url: str) -> None:
        left, top = self._px(x, y)
        right, bottom = self._px(x + 5, y + 2)
        # Night icon codes end in "n"
        fill = (70, 80, 140) if code.endswith("n") else (250, 204, 21)
        self._draw.ellipse((left, top, right, bottom), fill=fill)
        self.draw_text(x + 1, y, code, 15, 23, 42)

    def draw_spinner(self, x: int, y: int) -> None:
        left, top = self._px(x, y)
        right, bottom = self._px(x + 3, y + 2)
        self._draw.ellipse((left, top, right, bottom), outline=(60, 70, 90), width=2)
        self._draw.arc((left, top, right, bottom), start=-90, end=0, fill=(200, 200, 200), width=2)

    def draw_warning(self, x: int, y: int) -> None:
        left, top = self._px(x, y)
        right, bottom = self._px(x + 3, y + 2)
        self._draw.polygon(
            [((left + right) // 2, top), (right, bottom), (left, bottom)],
            fill=(252, 165, 165),
        )

    def save(self, filename: str) -> None:
        """
        Save canvas to a PNG file.

        Args:
            filename: Output filename (e.g., "dashboard.png")
        """
        self._image.save(filename)
        logging.info(f"Dashboard image saved to {filename}")

    def get_image(self):
        """Get the PIL Image object (for advanced usage)."""
        return self._image
