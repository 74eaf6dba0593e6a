"""Arrival board: card ordering, route colors and text output."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, Mapping, Sequence

from buswatch.data.models import ArrivalEstimate, RouteArrivals, StopSnapshot

FALLBACK_ROUTE_COLOR = "#666666"

NO_BUSES_TEXT = "No buses en route"
NO_DATA_TEXT = "No bus data found for this stop"
LOADING_TEXT = "Loading..."


@dataclass(frozen=True)
class BoardCard:
    """One route card: the soonest bus and the one after it."""

    route_id: str
    direction: str
    color: str
    primary: ArrivalEstimate | None = None
    following: ArrivalEstimate | None = None

    @property
    def empty(self) -> bool:
        return self.primary is None


@dataclass(frozen=True)
class Board:
    """Everything needed to draw one stop board."""

    title: str
    cards: tuple[BoardCard, ...]
    error: str | None = None
    updated_at: float | None = None
    loading: bool = False


def route_color(
    route_id: str,
    colors: Mapping[str, str] | None = None,
    fallback: str = FALLBACK_ROUTE_COLOR,
) -> str:
    """Display color for a route, or the fallback for unknown routes."""
    if not colors:
        return fallback
    return colors.get(route_id, fallback)


def order_routes(routes: Iterable[RouteArrivals]) -> tuple[list[RouteArrivals], list[RouteArrivals]]:
    """Split routes into (with arrivals sorted soonest first, without arrivals)."""
    routes = list(routes)
    with_arrivals = sorted(
        (route for route in routes if route.has_arrivals),
        key=lambda route: route.arrivals[0].minutes_value,
    )
    without_arrivals = [route for route in routes if not route.has_arrivals]
    return with_arrivals, without_arrivals


def _card(route: RouteArrivals, colors: Mapping[str, str] | None, fallback: str) -> BoardCard:
    arrivals = route.arrivals
    return BoardCard(
        route_id=route.route_id,
        direction=route.direction,
        color=route_color(route.route_id, colors, fallback),
        primary=arrivals[0] if arrivals else None,
        following=arrivals[1] if len(arrivals) > 1 else None,
    )


def build_board(
    snapshot: StopSnapshot | None,
    stop_code: str,
    pinned_routes: Sequence[str] = (),
    colors: Mapping[str, str] | None = None,
    fallback_color: str = FALLBACK_ROUTE_COLOR,
    title: str = "",
    error: str | None = None,
    updated_at: float | None = None,
) -> Board:
    """Build the board for a snapshot.

    With ``pinned_routes`` every pinned route gets a card even when the stop
    page omits it; routes without arrivals that are not pinned are hidden.
    Without pinned routes, empty routes from the page follow the active ones.
    """
    if snapshot is None:
        if error is None or not pinned_routes:
            return Board(
                title=title or f"Stop {stop_code}",
                cards=(),
                error=error,
                updated_at=updated_at,
                loading=error is None,
            )
        # A failed first fetch still shows the pinned routes.
        snapshot = StopSnapshot()

    with_arrivals, without_arrivals = order_routes(snapshot.routes)
    cards = [_card(route, colors, fallback_color) for route in with_arrivals]

    if pinned_routes:
        active = {route.route_id for route in with_arrivals}
        for route_id in pinned_routes:
            if route_id in active:
                continue
            cards.append(
                BoardCard(
                    route_id=route_id,
                    direction="",
                    color=route_color(route_id, colors, fallback_color),
                )
            )
    else:
        cards.extend(_card(route, colors, fallback_color) for route in without_arrivals)

    return Board(
        title=title or snapshot.stop_name or f"Stop {stop_code}",
        cards=tuple(cards),
        error=error,
        updated_at=updated_at,
    )


def refresh_label(is_refreshing: bool, cooldown_seconds: int) -> str:
    if is_refreshing:
        return "Refreshing..."
    if cooldown_seconds > 0:
        return f"Refresh ({cooldown_seconds}s)"
    return "Refresh"


def _arrival_text(arrival: ArrivalEstimate) -> str:
    return f"{arrival.display_text}, {arrival.distance_label}"


def format_card(card: BoardCard) -> list[str]:
    header = f"[{card.route_id}]"
    if card.direction:
        header = f"{header} {card.direction}"
    if card.primary is None:
        return [header, f"  {NO_BUSES_TEXT}"]
    lines = [header, f"  {card.primary.display_text}  {card.primary.distance_label}"]
    if card.following is not None:
        lines.append(f"  Then: {_arrival_text(card.following)}")
    return lines


def format_board(board: Board) -> list[str]:
    """Render a board as plain text lines."""
    lines = [board.title]
    if board.error:
        lines.append(f"Error: {board.error}")

    if board.loading:
        lines.append(LOADING_TEXT)
    elif not board.cards:
        lines.append(NO_DATA_TEXT)
    else:
        for card in board.cards:
            lines.extend(format_card(card))

    if board.updated_at is not None:
        updated = datetime.fromtimestamp(board.updated_at).strftime("%H:%M:%S")
        lines.append(f"Updated {updated}")
    return lines


__all__ = [
    "Board",
    "BoardCard",
    "FALLBACK_ROUTE_COLOR",
    "build_board",
    "format_board",
    "format_card",
    "order_routes",
    "refresh_label",
    "route_color",
]
