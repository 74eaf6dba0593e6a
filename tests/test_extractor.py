from __future__ import annotations

from bs4 import BeautifulSoup

from buswatch.data.extractor import (
    UNKNOWN_MINUTES_RANK,
    extract,
    parse_minutes_value,
    parse_stop_name,
    parse_stops_away,
)
from buswatch.data.models import ArrivalEstimate, RouteArrivals, StopSnapshot


def _block(header: str | None, *items: str) -> str:
    header_html = f"<p><strong>{header}</strong></p>" if header is not None else ""
    return f'<div class="directionAtStop">{header_html}{"".join(items)}</div>'


def test_extract_single_route_end_to_end() -> None:
    html = _block(
        "M101 Southbound",
        "<ol><li><strong>3 min</strong>utes, 2 stops away, <small>Vehicle 1234</small></li></ol>",
    )

    snapshot = extract(html)

    assert snapshot.routes == (
        RouteArrivals(
            route_id="M101",
            direction="Southbound",
            arrivals=(
                ArrivalEstimate(
                    display_text="3 min",
                    minutes_value=3,
                    distance_label="2 stops away",
                    vehicle_id="1234",
                ),
            ),
        ),
    )


def test_extract_full_page(stop_page_html: str) -> None:
    snapshot = extract(stop_page_html)

    assert snapshot.stop_name == "3 AV/E 23 ST"
    assert [route.route_id for route in snapshot.routes] == ["M101", "M103", "M102"]

    m101, m103, m102 = snapshot.routes
    assert [a.display_text for a in m101.arrivals] == ["3 min", "9 min"]
    assert m101.arrivals[1].distance_label == "~17 stops away"
    assert m101.arrivals[1].vehicle_id == "5678"
    assert m103.direction == "Select Bus Service to City Hall"
    assert m103.arrivals[0].distance_label == "Approaching"
    assert m103.arrivals[0].minutes_value == 1
    assert m102.arrivals == ()


def test_block_without_header_is_skipped() -> None:
    html = _block(None, "<ol><li><strong>3 min</strong>utes, 1 stop away</li></ol>")

    assert extract(html).routes == ()


def test_block_with_blank_header_is_skipped() -> None:
    html = _block("   ", "<ol><li><strong>3 min</strong></li></ol>")

    assert extract(html).routes == ()


def test_header_with_route_only_keeps_block() -> None:
    snapshot = extract(_block("  Q44  "))

    assert snapshot.routes == (RouteArrivals(route_id="Q44", direction="", arrivals=()),)


def test_route_without_lists_has_empty_arrivals() -> None:
    snapshot = extract(_block("B63 Cobble Hill", "<p>No buses are on their way</p>"))

    assert len(snapshot.routes) == 1
    assert snapshot.routes[0].arrivals == ()
    assert not snapshot.routes[0].has_arrivals


def test_empty_ordered_list_yields_no_arrival() -> None:
    html = _block(
        "M101 Southbound",
        "<ol></ol>",
        "<ol><li><strong>4 min</strong>utes, 3 stops away</li></ol>",
    )

    arrivals = extract(html).routes[0].arrivals

    assert [a.display_text for a in arrivals] == ["4 min"]


def test_only_first_list_item_is_read() -> None:
    html = _block(
        "M101 Southbound",
        "<ol><li><strong>2 min</strong>utes, 1 stop away</li><li><strong>8 min</strong></li></ol>",
    )

    arrivals = extract(html).routes[0].arrivals

    assert len(arrivals) == 1
    assert arrivals[0].display_text == "2 min"


def test_missing_fields_fall_back_to_defaults() -> None:
    html = _block("M101 Southbound", "<ol><li>en route</li></ol>")

    arrival = extract(html).routes[0].arrivals[0]

    assert arrival.display_text == ""
    assert arrival.minutes_value == UNKNOWN_MINUTES_RANK
    assert arrival.distance_label == ""
    assert arrival.vehicle_id == ""


def test_distance_at_end_of_text_without_vehicle() -> None:
    html = _block("M101 Southbound", "<ol><li><strong>12 min</strong>utes, 0.5 miles away</li></ol>")

    arrival = extract(html).routes[0].arrivals[0]

    assert arrival.distance_label == "~4 stops away"
    assert arrival.vehicle_id == ""


def test_extract_malformed_input_is_total() -> None:
    assert extract("") == StopSnapshot(stop_name="", routes=())
    assert extract("<div class='directionAtStop'><p><strong>").routes == ()
    assert extract("not html at all < > &").routes == ()


def test_parse_minutes_value() -> None:
    assert parse_minutes_value("Approaching") == 0
    assert parse_minutes_value("APPROACHING") == 0
    assert parse_minutes_value("<1 min") == 0.5
    assert parse_minutes_value("garbage") == 999
    assert parse_minutes_value("") == 999
    assert parse_minutes_value("7 min") == 7
    assert parse_minutes_value(" 12.5 minutes") == 12.5


def test_parse_stops_away() -> None:
    assert parse_stops_away("3 stops away") == "3 stops away"
    assert parse_stops_away("1 stop away") == "1 stops away"
    assert parse_stops_away("2.1 miles away") == "~17 stops away"
    assert parse_stops_away("0.05 miles away") == "~1 stops away"
    assert parse_stops_away("Approaching now") == "Approaching"
    assert parse_stops_away("approaching, 2 stops away") == "2 stops away"
    assert parse_stops_away("at stop") == "at stop"
    assert parse_stops_away("") == ""


def test_parse_stops_away_rounds_halves_up() -> None:
    assert parse_stops_away("0.3125 miles away") == "~3 stops away"


def test_parse_stop_name_skips_blank_siblings() -> None:
    soup = BeautifulSoup(
        "<div><h3>Bus Stop:</h3>  <span> </span><strong>LEXINGTON AV/E 86 ST</strong></div>",
        "html.parser",
    )

    assert parse_stop_name(soup) == "LEXINGTON AV/E 86 ST"


def test_parse_stop_name_missing() -> None:
    assert parse_stop_name(BeautifulSoup("<h3>Routes</h3> M101", "html.parser")) == ""
    assert parse_stop_name(BeautifulSoup("<div><h3>Bus Stop:</h3></div>", "html.parser")) == ""
