import xml.etree.ElementTree as ET

from runroute.export import route_map, route_to_gpx, save_gpx, waypoint_name
from runroute.geo import interpolate
from runroute.models import (
    ElevationPoint,
    ResolvedRoute,
    RouteDetails,
    RouteDifficulty,
    RouteOption,
    RouteStrategy,
)

GPX_NS = {"gpx": "http://www.topografix.com/GPX/1/1"}


def ring_route(square_ring):
    route = []
    for a, b in zip(square_ring, square_ring[1:]):
        route.extend(interpolate(a, b, 5))
    return route


def test_waypoint_names():
    assert [waypoint_name(i, 4) for i in range(4)] == ["Start", "Waypoint 1", "Waypoint 2", "Finish"]


class TestGpx:
    def test_document_structure(self, square_ring):
        route = ring_route(square_ring)
        root = ET.fromstring(route_to_gpx(route, square_ring))

        waypoints = root.findall("gpx:wpt", GPX_NS)
        points = root.findall("gpx:trk/gpx:trkseg/gpx:trkpt", GPX_NS)
        assert len(waypoints) == 4
        assert waypoints[0].find("gpx:name", GPX_NS).text == "Start"
        assert len(points) == len(route)
        assert float(points[0].get("lat")) == round(route[0].lat, 6)
        assert root.get("creator") == "Runroute"

    def test_name_is_escaped(self, square_ring):
        text = route_to_gpx(ring_route(square_ring), square_ring, name="Park & <River>")
        root = ET.fromstring(text)
        assert root.find("gpx:trk/gpx:name", GPX_NS).text == "Park & <River>"

    def test_save(self, tmp_path, square_ring, capsys):
        path = tmp_path / "loop.gpx"
        save_gpx(str(path), ring_route(square_ring), square_ring)
        assert path.read_text().startswith('<?xml version="1.0"')
        assert "GPX route saved to:" in capsys.readouterr().out


class TestRouteMap:
    def test_renders_route_and_start(self, start, square_ring):
        html = route_map(ring_route(square_ring), square_ring, start).get_root().render()
        assert "Start / finish" in html
        assert "Waypoint 1" in html

    def test_options_and_legend(self, start, square_ring):
        route = ring_route(square_ring)
        resolved = ResolvedRoute(coordinates=route, steps=[])
        option = RouteOption(
            strategy=RouteStrategy.SCENIC,
            waypoints=tuple(square_ring),
            route=resolved,
            estimated_distance=1200.0,
            waypoint_count=3,
            complexity=RouteOption.complexity_for(3),
        )
        details = RouteDetails(
            number_of_turns=3, right_turns=3, left_turns=0, sharp_turns=0,
            elevation_profile=[ElevationPoint(0.0, 10.0)],
            total_elevation_gain=42.0, total_elevation_loss=40.0,
            max_elevation=52.0, min_elevation=10.0,
            average_grade=3.5, max_grade=6.0,
            road_percentage=70, trail_percentage=0, unknown_percentage=30,
            difficulty=RouteDifficulty.MODERATE,
            estimated_time=900,
        )
        html = route_map(route, square_ring, start, details, [option]).get_root().render()

        assert "Scenic option" in html
        assert "Difficulty: Moderate" in html
        assert "Climb: 42 m" in html
