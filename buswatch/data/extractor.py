"""Extract arrival records from BusTime mobile stop pages.

The upstream page is loosely structured: one ``.directionAtStop`` block per
route and direction, a ``<p><strong>`` header naming the route, and one
``<ol>`` per approaching bus. Extraction is total; anything missing degrades
to an empty string or the sentinel rank rather than raising.
"""

from __future__ import annotations

import logging
import math
import re

from bs4 import BeautifulSoup, Tag
from bs4.builder import ParserRejectedMarkup

from buswatch.data.models import ArrivalEstimate, RouteArrivals, StopSnapshot

logger = logging.getLogger(__name__)

UNKNOWN_MINUTES_RANK = 999.0
UNDER_ONE_MINUTE_RANK = 0.5
STOPS_PER_MILE = 8

STOP_HEADING_MARKER = "Bus Stop:"
VEHICLE_PREFIX = "Vehicle "

_LEADING_NUMBER_RE = re.compile(r"^\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")
_DISTANCE_RE = re.compile(r"minutes?\s*,\s*(.+?)(?:\s*Vehicle|\s*$)")
_STOPS_AWAY_RE = re.compile(r"([\d<]+)\s*stops?\s*away", re.IGNORECASE)
_MILES_AWAY_RE = re.compile(r"([\d.]+)\s*miles?\s*away", re.IGNORECASE)


def _leading_float(text: str) -> float | None:
    match = _LEADING_NUMBER_RE.match(text)
    if not match:
        return None
    return float(match.group(1))


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def parse_minutes_value(text: str) -> float:
    """Rank arrival text for sorting: approaching 0, under a minute 0.5, else minutes."""
    if "approaching" in text.lower():
        return 0.0
    if "<" in text:
        return UNDER_ONE_MINUTE_RANK
    value = _leading_float(text)
    if value is None:
        return UNKNOWN_MINUTES_RANK
    return value


def parse_stops_away(distance_text: str) -> str:
    """Normalize upstream distance text to a stops-away label."""
    stops_match = _STOPS_AWAY_RE.search(distance_text)
    if stops_match:
        return f"{stops_match.group(1)} stops away"

    if "approaching" in distance_text.lower():
        return "Approaching"

    miles_match = _MILES_AWAY_RE.search(distance_text)
    if miles_match:
        miles = _leading_float(miles_match.group(1))
        if miles is not None:
            stops = max(1, _round_half_up(miles * STOPS_PER_MILE))
            return f"~{stops} stops away"

    return distance_text


def parse_stop_name(soup: BeautifulSoup) -> str:
    """Return the text following the ``Bus Stop:`` heading, or an empty string."""
    for heading in soup.find_all("h3"):
        if STOP_HEADING_MARKER not in heading.get_text():
            continue
        for sibling in heading.next_siblings:
            text = sibling.get_text() if isinstance(sibling, Tag) else str(sibling)
            text = text.strip()
            if text:
                return text
    return ""


def _parse_header(header_text: str) -> tuple[str, str] | None:
    parts = header_text.strip().split(None, 1)
    if not parts:
        return None
    route_id = parts[0]
    direction = parts[1].strip() if len(parts) > 1 else ""
    return route_id, direction


def _parse_arrival(item: Tag) -> ArrivalEstimate:
    minutes_el = item.find("strong")
    display_text = minutes_el.get_text().strip() if minutes_el else ""

    vehicle_el = item.find("small")
    vehicle_id = vehicle_el.get_text().strip().replace(VEHICLE_PREFIX, "", 1) if vehicle_el else ""

    distance_match = _DISTANCE_RE.search(item.get_text())
    raw_distance = distance_match.group(1).strip() if distance_match else ""

    return ArrivalEstimate(
        display_text=display_text,
        minutes_value=parse_minutes_value(display_text),
        distance_label=parse_stops_away(raw_distance),
        vehicle_id=vehicle_id,
    )


def _parse_route_block(block: Tag) -> RouteArrivals | None:
    header_el = block.select_one("p strong")
    if header_el is None:
        logger.debug("Skipping route block without a header")
        return None

    header = _parse_header(header_el.get_text())
    if header is None:
        logger.debug("Skipping route block with an empty header")
        return None
    route_id, direction = header

    arrivals = []
    for ordered_list in block.find_all("ol"):
        # Upstream renders one bus per <ol>; later items are ignored.
        item = ordered_list.find("li")
        if item is None:
            continue
        arrivals.append(_parse_arrival(item))

    return RouteArrivals(route_id=route_id, direction=direction, arrivals=tuple(arrivals))


def extract(html: str) -> StopSnapshot:
    """Parse a stop page into a StopSnapshot; never raises on malformed markup."""
    try:
        soup = BeautifulSoup(html or "", "html.parser")
    except ParserRejectedMarkup:
        logger.warning("Stop page markup rejected by the parser")
        return StopSnapshot()

    routes = []
    for block in soup.select(".directionAtStop"):
        route = _parse_route_block(block)
        if route is not None:
            routes.append(route)

    return StopSnapshot(stop_name=parse_stop_name(soup), routes=tuple(routes))


__all__ = [
    "UNKNOWN_MINUTES_RANK",
    "extract",
    "parse_minutes_value",
    "parse_stop_name",
    "parse_stops_away",
]
