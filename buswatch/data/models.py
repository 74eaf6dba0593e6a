"""Typed records extracted from a BusTime stop page."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class ArrivalEstimate:
    """Single bus approaching the stop."""

    display_text: str
    minutes_value: float  # sort key only, never displayed
    distance_label: str
    vehicle_id: str = ""


@dataclass(frozen=True)
class RouteArrivals:
    """All arrivals for one route and direction, soonest first."""

    route_id: str
    direction: str = ""
    arrivals: tuple[ArrivalEstimate, ...] = ()

    @property
    def has_arrivals(self) -> bool:
        return len(self.arrivals) > 0


@dataclass(frozen=True)
class StopSnapshot:
    """Result of one extraction over a stop page."""

    stop_name: str = ""
    routes: tuple[RouteArrivals, ...] = ()


__all__ = ["ArrivalEstimate", "RouteArrivals", "StopSnapshot"]
