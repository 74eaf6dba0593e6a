"""Board image composer."""

from __future__ import annotations

from PIL import Image, ImageColor, ImageDraw, ImageFont

from buswatch.logic.board import LOADING_TEXT, NO_BUSES_TEXT, NO_DATA_TEXT, Board, BoardCard

MIN_WIDTH = 160
DEFAULT_WIDTH = 320

TITLE_HEIGHT = 20
CARD_HEIGHT = 36
CARD_GAP = 2
BADGE_WIDTH = 56
TEXT_LEFT_PAD = 6
TEXT_TOP_PAD = 4
LINE_HEIGHT = 14

COLOR_BACKGROUND = (0, 0, 0)
COLOR_TITLE = (255, 255, 255)
COLOR_TEXT = (255, 255, 255)
COLOR_SECONDARY = (136, 136, 136)
COLOR_DIM_TEXT = (72, 72, 72)
COLOR_ERROR = (200, 0, 0)
COLOR_CARD = (26, 26, 26)

FONT = ImageFont.load_default()


def _text_size(draw: ImageDraw.ImageDraw, text: str) -> tuple[int, int]:
    bbox = draw.textbbox((0, 0), text, font=FONT)
    return bbox[2] - bbox[0], bbox[3] - bbox[1]


def _draw_title(draw: ImageDraw.ImageDraw, board: Board, width: int) -> None:
    _, text_height = _text_size(draw, board.title)
    text_y = (TITLE_HEIGHT - text_height) // 2
    draw.text((TEXT_LEFT_PAD, text_y), board.title, font=FONT, fill=COLOR_TITLE)
    if board.error:
        error_width, _ = _text_size(draw, board.error)
        draw.text((width - error_width - TEXT_LEFT_PAD, text_y), board.error, font=FONT, fill=COLOR_ERROR)


def _draw_card(draw: ImageDraw.ImageDraw, index: int, card: BoardCard, width: int) -> None:
    top = TITLE_HEIGHT + index * CARD_HEIGHT
    bottom = top + CARD_HEIGHT - CARD_GAP - 1

    draw.rectangle((0, top, width - 1, bottom), fill=COLOR_CARD)
    draw.rectangle((0, top, BADGE_WIDTH - 1, bottom), fill=ImageColor.getrgb(card.color))

    route_width, route_height = _text_size(draw, card.route_id)
    route_x = max(0, (BADGE_WIDTH - route_width) // 2)
    route_y = top + (CARD_HEIGHT - CARD_GAP - route_height) // 2
    draw.text((route_x, route_y), card.route_id, font=FONT, fill=COLOR_TEXT)

    text_x = BADGE_WIDTH + TEXT_LEFT_PAD
    text_y = top + TEXT_TOP_PAD
    if card.primary is None:
        draw.text((text_x, text_y), NO_BUSES_TEXT, font=FONT, fill=COLOR_DIM_TEXT)
        return

    minutes_text = card.primary.display_text
    minutes_width, _ = _text_size(draw, minutes_text)
    draw.text((text_x, text_y), minutes_text, font=FONT, fill=COLOR_TEXT)
    draw.text(
        (text_x + minutes_width + TEXT_LEFT_PAD, text_y),
        card.primary.distance_label,
        font=FONT,
        fill=COLOR_SECONDARY,
    )
    if card.following is not None:
        then_text = f"Then: {card.following.display_text}, {card.following.distance_label}"
        draw.text((text_x, text_y + LINE_HEIGHT), then_text, font=FONT, fill=COLOR_SECONDARY)


def compose_board(board: Board, width: int = DEFAULT_WIDTH) -> Image.Image:
    """Compose an RGB image with a title strip and one row per card."""
    if width < MIN_WIDTH:
        raise ValueError(f"Width must be at least {MIN_WIDTH}, got {width}.")

    rows = max(1, len(board.cards))
    height = TITLE_HEIGHT + rows * CARD_HEIGHT
    image = Image.new("RGB", (width, height), COLOR_BACKGROUND)
    draw = ImageDraw.Draw(image)

    _draw_title(draw, board, width)

    if not board.cards:
        message = LOADING_TEXT if board.loading else NO_DATA_TEXT
        draw.text((TEXT_LEFT_PAD, TITLE_HEIGHT + TEXT_TOP_PAD), message, font=FONT, fill=COLOR_DIM_TEXT)
        return image

    for idx, card in enumerate(board.cards):
        _draw_card(draw, idx, card, width)

    return image


__all__ = ["compose_board"]
