"""Configuration loader for the BusWatch app."""

from __future__ import annotations

from dataclasses import dataclass, field
import os
from typing import Any

from dotenv import load_dotenv
from PIL import ImageColor
import yaml

from buswatch.data.bustime_client import BUSTIME_MOBILE_URL
from buswatch.data.poller import DEFAULT_AUTO_REFRESH_INTERVAL_SECONDS, DEFAULT_COOLDOWN_TICK_SECONDS
from buswatch.data.refresh import DEFAULT_MIN_REQUEST_GAP_SECONDS
from buswatch.logic.board import FALLBACK_ROUTE_COLOR

DEFAULT_ROUTE_COLORS = {
    "M101": "#0039A6",
    "M102": "#00933C",
    "M103": "#B933AD",
}
DEFAULT_FALLBACK_COLOR = FALLBACK_ROUTE_COLOR
DEFAULT_BOARD_WIDTH = 320


@dataclass(frozen=True)
class BusTimeConfig:
    """Upstream BusTime configuration."""

    stop_code: str
    base_url: str = BUSTIME_MOBILE_URL
    timeout_seconds: float = 10


@dataclass(frozen=True)
class RefreshConfig:
    """Refresh timing."""

    min_request_gap_seconds: float = DEFAULT_MIN_REQUEST_GAP_SECONDS
    auto_refresh_interval_seconds: float = DEFAULT_AUTO_REFRESH_INTERVAL_SECONDS
    cooldown_tick_seconds: float = DEFAULT_COOLDOWN_TICK_SECONDS


@dataclass(frozen=True)
class DisplayConfig:
    """Board presentation for the configured stop."""

    title: str = ""
    pinned_routes: tuple[str, ...] = tuple(DEFAULT_ROUTE_COLORS)
    route_colors: dict[str, str] = field(default_factory=lambda: dict(DEFAULT_ROUTE_COLORS))
    fallback_color: str = DEFAULT_FALLBACK_COLOR
    width: int = DEFAULT_BOARD_WIDTH


@dataclass(frozen=True)
class LoggingConfig:
    """Logging configuration."""

    level: str
    log_dir: str


@dataclass(frozen=True)
class AppConfig:
    """Top-level application configuration."""

    bustime: BusTimeConfig
    refresh: RefreshConfig
    display: DisplayConfig
    log: LoggingConfig


def _require_key(mapping: dict[str, Any], key: str, context: str) -> Any:
    if key not in mapping:
        raise ValueError(f"Missing required key '{key}' in {context} config")
    return mapping[key]


def _section(data: dict[str, Any], key: str, required: bool) -> dict[str, Any]:
    if required:
        section = _require_key(data, key, key)
    else:
        section = data.get(key) or {}
    if not isinstance(section, dict):
        raise ValueError(f"'{key}' config must be a mapping")
    return section


def _positive(value: Any, key: str, context: str) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"'{key}' in {context} config must be a number") from exc
    if number <= 0:
        raise ValueError(f"'{key}' in {context} config must be positive")
    return number


def _color(value: Any, key: str) -> str:
    color = str(value)
    try:
        ImageColor.getrgb(color)
    except ValueError as exc:
        raise ValueError(f"'{key}' in display config has an invalid color: {color}") from exc
    return color


def load_config(path: str = "config/config.yaml") -> AppConfig:
    """Load application configuration from a YAML file."""
    load_dotenv()
    try:
        with open(path, "r", encoding="utf-8") as handle:
            data = yaml.safe_load(handle)
    except FileNotFoundError as exc:
        raise ValueError(f"Config file not found: {path}") from exc

    if not isinstance(data, dict):
        raise ValueError("Config file must contain a mapping at the top level")

    bustime_section = _section(data, "bustime", required=True)
    refresh_section = _section(data, "refresh", required=False)
    display_section = _section(data, "display", required=False)
    logging_section = _section(data, "logging", required=True)

    stop_code = os.environ.get("BUSWATCH_STOP_CODE") or _require_key(bustime_section, "stop_code", "bustime")
    bustime = BusTimeConfig(
        stop_code=str(stop_code),
        base_url=os.environ.get("BUSTIME_BASE_URL") or bustime_section.get("base_url", BUSTIME_MOBILE_URL),
        timeout_seconds=_positive(bustime_section.get("timeout_seconds", 10), "timeout_seconds", "bustime"),
    )

    refresh = RefreshConfig(
        min_request_gap_seconds=_positive(
            refresh_section.get("min_request_gap_seconds", DEFAULT_MIN_REQUEST_GAP_SECONDS),
            "min_request_gap_seconds",
            "refresh",
        ),
        auto_refresh_interval_seconds=_positive(
            refresh_section.get("auto_refresh_interval_seconds", DEFAULT_AUTO_REFRESH_INTERVAL_SECONDS),
            "auto_refresh_interval_seconds",
            "refresh",
        ),
        cooldown_tick_seconds=_positive(
            refresh_section.get("cooldown_tick_seconds", DEFAULT_COOLDOWN_TICK_SECONDS),
            "cooldown_tick_seconds",
            "refresh",
        ),
    )

    route_colors = display_section.get("route_colors", DEFAULT_ROUTE_COLORS)
    if not isinstance(route_colors, dict):
        raise ValueError("'route_colors' in display config must be a mapping")
    display = DisplayConfig(
        title=str(display_section.get("title") or ""),
        pinned_routes=tuple(str(route) for route in display_section.get("pinned_routes", DEFAULT_ROUTE_COLORS) or ()),
        route_colors={str(route): _color(color, "route_colors") for route, color in route_colors.items()},
        fallback_color=_color(display_section.get("fallback_color", DEFAULT_FALLBACK_COLOR), "fallback_color"),
        width=int(display_section.get("width", DEFAULT_BOARD_WIDTH)),
    )

    logging = LoggingConfig(
        level=_require_key(logging_section, "level", "logging"),
        log_dir=_require_key(logging_section, "log_dir", "logging"),
    )

    return AppConfig(bustime=bustime, refresh=refresh, display=display, log=logging)
