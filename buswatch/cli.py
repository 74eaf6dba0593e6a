"""Command-line interface for BusWatch."""

from __future__ import annotations

import argparse
from dataclasses import dataclass
import logging
from pathlib import Path
import sys
from typing import Mapping, Sequence

from buswatch import __version__
from buswatch.config import AppConfig, load_config
from buswatch.data.bustime_client import BusTimeClient
from buswatch.data.poller import RefreshScheduler
from buswatch.data.refresh import RefreshController, RefreshResult
from buswatch.logic.board import Board, build_board, format_board, refresh_label
from buswatch.rendering import compose_board, save_frame

LOG_FILE_NAME = "buswatch.log"

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BoardView:
    """Which stop to show and how to lay out its board."""

    stop_code: str
    pinned_routes: tuple[str, ...]
    title: str
    colors: Mapping[str, str]
    fallback_color: str
    width: int


def setup_logging(level: str = "INFO", log_dir: str | None = None, verbose: bool = False) -> None:
    """Configure console and file logging."""
    if verbose:
        log_level = logging.DEBUG
    else:
        log_level = getattr(logging, str(level).upper(), logging.INFO)

    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if log_dir:
        log_path = Path(log_dir)
        log_path.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_path / LOG_FILE_NAME, encoding="utf-8"))

    logging.basicConfig(
        level=log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        handlers=handlers,
        force=True,
    )


def board_view(config: AppConfig, stop_code: str | None = None) -> BoardView:
    """The configured stop keeps its pinned routes and title; other stops do not."""
    display = config.display
    if stop_code and stop_code.strip() != config.bustime.stop_code:
        return BoardView(
            stop_code=stop_code.strip(),
            pinned_routes=(),
            title="",
            colors=display.route_colors,
            fallback_color=display.fallback_color,
            width=display.width,
        )
    return BoardView(
        stop_code=config.bustime.stop_code,
        pinned_routes=display.pinned_routes,
        title=display.title,
        colors=display.route_colors,
        fallback_color=display.fallback_color,
        width=display.width,
    )


def build_controller(config: AppConfig, stop_code: str) -> RefreshController:
    client = BusTimeClient(config.bustime.base_url, config.bustime.timeout_seconds)
    return RefreshController(
        fetch_html=lambda: client.get_stop_html(stop_code),
        min_request_gap_seconds=config.refresh.min_request_gap_seconds,
    )


def render_result(view: BoardView, result: RefreshResult, frame_path: str | None = None) -> Board:
    """Print the board for a refresh result and optionally write its PNG."""
    board = build_board(
        result.snapshot,
        view.stop_code,
        pinned_routes=view.pinned_routes,
        colors=view.colors,
        fallback_color=view.fallback_color,
        title=view.title,
        error=result.error,
        updated_at=result.updated_at,
    )
    print("\n".join(format_board(board)), flush=True)
    if frame_path:
        save_frame(compose_board(board, view.width), frame_path)
    return board


def _load(args: argparse.Namespace) -> AppConfig | None:
    try:
        config = load_config(args.config)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return None
    setup_logging(config.log.level, config.log.log_dir, args.verbose)
    return config


def cmd_show(args: argparse.Namespace) -> int:
    """Execute show command."""
    config = _load(args)
    if config is None:
        return 1

    view = board_view(config, args.stop_code)
    if not view.stop_code:
        print("Error: Missing stop code", file=sys.stderr)
        return 1

    controller = build_controller(config, view.stop_code)
    result = controller.request_refresh()
    if result is None:
        return 1
    render_result(view, result, args.frame)
    return 1 if result.error else 0


def cmd_watch(args: argparse.Namespace) -> int:
    """Execute watch command."""
    config = _load(args)
    if config is None:
        return 1

    view = board_view(config, args.stop_code)
    if not view.stop_code:
        print("Error: Missing stop code", file=sys.stderr)
        return 1

    controller = build_controller(config, view.stop_code)
    scheduler = RefreshScheduler(
        controller,
        auto_refresh_interval_seconds=config.refresh.auto_refresh_interval_seconds,
        on_result=lambda result: render_result(view, result, args.frame),
        on_tick=lambda seconds: logger.debug("Refresh cooldown: %ss", seconds),
        tick_seconds=config.refresh.cooldown_tick_seconds,
    )

    print("Commands: r = refresh, q = quit", flush=True)
    scheduler.start()
    try:
        for line in sys.stdin:
            command = line.strip().lower()
            if command == "q":
                break
            if command == "r":
                if scheduler.refresh_now() is None:
                    label = refresh_label(
                        controller.is_refreshing(),
                        controller.get_cooldown_seconds_remaining(),
                    )
                    print(label, flush=True)
        else:
            scheduler.join()
    except KeyboardInterrupt:
        pass
    finally:
        scheduler.stop()
        scheduler.join(timeout=config.bustime.timeout_seconds)
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        prog="buswatch",
        description="Real-time bus arrivals scraped from BusTime stop pages",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    subparsers = parser.add_subparsers(dest="command", required=True)

    for name, handler, help_text in (
        ("show", cmd_show, "Fetch a stop once and print its board"),
        ("watch", cmd_watch, "Keep a stop board refreshed"),
    ):
        sub = subparsers.add_parser(name, help=help_text)
        sub.add_argument("stop_code", nargs="?", help="Stop code (defaults to the configured stop)")
        sub.add_argument("--config", default="config/config.yaml", help="Path to config YAML")
        sub.add_argument("--frame", help="Also write the board as a PNG to this path")
        sub.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
        sub.set_defaults(func=handler)

    args = parser.parse_args(argv)
    return args.func(args)


if __name__ == "__main__":
    raise SystemExit(main())
