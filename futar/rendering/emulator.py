"""Preview images of screens at watch resolution."""

from __future__ import annotations

from pathlib import Path
import textwrap

from PIL import Image, ImageDraw, ImageFont

from futar.rendering.screen_data import DetailCard, Screen

SCREEN_WIDTH = 144
SCREEN_HEIGHT = 168

MARGIN = 4
HEADER_HEIGHT = 14
ROW_HEIGHT = 26
LINE_HEIGHT = 12
WRAP_CHARS = 22

COLOR_BACKGROUND = (255, 255, 255)
COLOR_TEXT = (0, 0, 0)
COLOR_SUBTEXT = (85, 85, 85)
COLOR_HEADER = (0, 0, 0)
COLOR_HEADER_TEXT = (255, 255, 255)
COLOR_RETRY = (0, 85, 170)

FONT = ImageFont.load_default()


def _new_canvas(width: int, height: int) -> tuple[Image.Image, ImageDraw.ImageDraw]:
    if width < SCREEN_WIDTH or height < SCREEN_HEIGHT:
        raise ValueError(f"Preview must be at least {SCREEN_WIDTH}x{SCREEN_HEIGHT}, got {width}x{height}.")
    image = Image.new("RGB", (width, height), COLOR_BACKGROUND)
    return image, ImageDraw.Draw(image)


def _draw_wrapped(draw: ImageDraw.ImageDraw, top: int, text: str, height: int, color: tuple[int, int, int]) -> int:
    for paragraph in text.split("\n"):
        for line in textwrap.wrap(paragraph, WRAP_CHARS) or [""]:
            if top + LINE_HEIGHT > height:
                return top
            draw.text((MARGIN, top), line, font=FONT, fill=color)
            top += LINE_HEIGHT
    return top


def _draw_status(draw: ImageDraw.ImageDraw, title: str, message: str, retry: bool, width: int, height: int) -> None:
    draw.text((MARGIN, MARGIN), title, font=FONT, fill=COLOR_TEXT)
    _draw_wrapped(draw, MARGIN + 2 * LINE_HEIGHT, message, height, COLOR_TEXT)
    if retry:
        cx, cy = width - MARGIN - 5, height // 2
        draw.ellipse([cx - 5, cy - 5, cx + 5, cy + 5], outline=COLOR_RETRY, width=2)


def _draw_menu(draw: ImageDraw.ImageDraw, screen: Screen, width: int, height: int) -> None:
    top = 0
    for section in screen.sections:
        if top + HEADER_HEIGHT > height:
            return
        draw.rectangle((0, top, width - 1, top + HEADER_HEIGHT - 1), fill=COLOR_HEADER)
        draw.text((MARGIN, top + 1), section.title, font=FONT, fill=COLOR_HEADER_TEXT)
        top += HEADER_HEIGHT
        for item in section.items:
            if top + ROW_HEIGHT > height:
                return
            draw.text((MARGIN, top + 1), item.title, font=FONT, fill=COLOR_TEXT)
            if item.subtitle:
                draw.text((MARGIN, top + LINE_HEIGHT + 1), item.subtitle, font=FONT, fill=COLOR_SUBTEXT)
            top += ROW_HEIGHT


def render_screen(screen: Screen, title: str, width: int = SCREEN_WIDTH, height: int = SCREEN_HEIGHT) -> Image.Image:
    """Draw the status card when the screen has one, otherwise the menu sections."""
    image, draw = _new_canvas(width, height)
    if screen.status is not None:
        _draw_status(draw, title, screen.status.message, screen.status.retry_available, width, height)
    else:
        _draw_menu(draw, screen, width, height)
    return image


def render_card(card: DetailCard, width: int = SCREEN_WIDTH, height: int = SCREEN_HEIGHT) -> Image.Image:
    image, draw = _new_canvas(width, height)
    draw.text((MARGIN, MARGIN), card.title, font=FONT, fill=COLOR_TEXT)
    _draw_wrapped(draw, MARGIN + LINE_HEIGHT, card.body, height, COLOR_SUBTEXT)
    return image


def save_frame(image: Image.Image, path: str = "emulator_output/frame.png") -> None:
    """Save a preview to disk as a PNG image."""
    output_path = Path(path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    image.save(output_path, format="PNG")


__all__ = ["SCREEN_HEIGHT", "SCREEN_WIDTH", "render_card", "render_screen", "save_frame"]
