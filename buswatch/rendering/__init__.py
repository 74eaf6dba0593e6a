"""Rendering utilities for the arrival board."""

from buswatch.rendering.composer import compose_board
from buswatch.rendering.emulator import save_frame

__all__ = ["compose_board", "save_frame"]
