"""PNG output for composed boards."""

from __future__ import annotations

from pathlib import Path

from PIL import Image


def save_frame(image: Image.Image, path: str = "board_output/board.png") -> None:
    """Save a board image to disk as a PNG, creating parent directories."""
    output_path = Path(path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    image.save(output_path, format="PNG")


__all__ = ["save_frame"]
