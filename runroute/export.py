"""Route export: GPX for navigation apps and an interactive HTML map."""

from datetime import datetime, timezone
from typing import Optional, Sequence
from xml.sax.saxutils import escape

import folium
from folium import plugins

from .geo import format_distance, path_distance
from .models import Location, RouteDetails, RouteOption


def waypoint_name(index: int, count: int) -> str:
    if index == 0:
        return "Start"
    if index == count - 1:
        return "Finish"
    return f"Waypoint {index}"


def route_to_gpx(route: Sequence[Location], waypoints: Sequence[Location],
                 name: str = "Runroute Loop") -> str:
    """GPX 1.1 document with the waypoint ring and the route as one track"""
    distance = path_distance(route)
    timestamp = datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")

    gpx_lines = [
        '<?xml version="1.0" encoding="UTF-8"?>',
        '<gpx version="1.1" creator="Runroute"',
        '     xmlns="http://www.topografix.com/GPX/1/1"',
        '     xmlns:xsi="http://www.w3.org/2001/XMLSchema-instance"',
        '     xsi:schemaLocation="http://www.topografix.com/GPX/1/1 http://www.topografix.com/GPX/1/1/gpx.xsd">',
        '  <metadata>',
        f'    <name>{escape(name)} ({distance/1000:.2f} km)</name>',
        f'    <time>{timestamp}</time>',
        '  </metadata>',
    ]

    # The closing anchor repeats the start, so it is not written twice
    ring = list(waypoints)
    if len(ring) > 1 and ring[-1].close_to(ring[0], 1.0):
        ring = ring[:-1]
    for i, wp in enumerate(ring):
        gpx_lines.append(f'  <wpt lat="{wp.lat:.6f}" lon="{wp.lon:.6f}">')
        gpx_lines.append(f'    <name>{waypoint_name(i, len(ring) + 1)}</name>')
        gpx_lines.append('  </wpt>')

    gpx_lines.append('  <trk>')
    gpx_lines.append(f'    <name>{escape(name)}</name>')
    gpx_lines.append('    <trkseg>')
    for point in route:
        gpx_lines.append(f'      <trkpt lat="{point.lat:.6f}" lon="{point.lon:.6f}"/>')
    gpx_lines.append('    </trkseg>')
    gpx_lines.append('  </trk>')
    gpx_lines.append('</gpx>')
    return '\n'.join(gpx_lines)


def save_gpx(path: str, route: Sequence[Location], waypoints: Sequence[Location],
             name: str = "Runroute Loop"):
    with open(path, "w") as f:
        f.write(route_to_gpx(route, waypoints, name))
    print(f"\nGPX route saved to: {path}")


STRATEGY_COLORS = {
    "Balanced": "#1f77b4",
    "Scenic": "#2ca02c",
    "Direct": "#d62728",
    "Varied": "#9467bd",
}


def route_map(route: Sequence[Location], waypoints: Sequence[Location],
              start: Location, details: Optional[RouteDetails] = None,
              options: Sequence[RouteOption] = ()) -> folium.Map:
    """Interactive map of the active route, its waypoints and any alternatives"""
    m = folium.Map(
        location=[start.lat, start.lon],
        zoom_start=15,
        tiles="CartoDB positron"
    )
    folium.TileLayer("OpenStreetMap", name="OpenStreetMap").add_to(m)
    folium.TileLayer("CartoDB dark_matter", name="Dark Mode").add_to(m)

    for option in options:
        layer = folium.FeatureGroup(name=f"{option.strategy.value} option", show=False)
        folium.PolyLine(
            [p.as_tuple() for p in option.route.coordinates],
            weight=3,
            color=STRATEGY_COLORS.get(option.strategy.value, "#888888"),
            opacity=0.6,
            popup=folium.Popup(
                f"<b>{option.strategy.value}</b><br>"
                f"{format_distance(option.estimated_distance)}<br>"
                f"{option.waypoint_count} waypoints ({option.complexity})",
                max_width=200
            )
        ).add_to(layer)
        layer.add_to(m)

    route_layer = folium.FeatureGroup(name="Route", show=True)
    if route:
        folium.PolyLine(
            [p.as_tuple() for p in route],
            weight=5,
            color="#ff6600",
            opacity=0.8,
            popup=folium.Popup(format_distance(path_distance(route)), max_width=200)
        ).add_to(route_layer)

    for i, wp in enumerate(waypoints[1:-1], start=1):
        folium.CircleMarker(
            wp.as_tuple(),
            radius=5,
            color="#ff6600",
            fill=True,
            popup=waypoint_name(i, len(waypoints))
        ).add_to(route_layer)
    route_layer.add_to(m)

    folium.Marker(
        start.as_tuple(),
        popup="Start / finish",
        icon=folium.Icon(color="blue", icon="home")
    ).add_to(m)

    folium.LayerControl().add_to(m)

    if details:
        legend_html = f"""
        <div style="
            position: fixed;
            bottom: 50px;
            left: 50px;
            z-index: 1000;
            background-color: white;
            padding: 10px;
            border-radius: 5px;
            border: 2px solid grey;
            font-family: Arial;
            font-size: 12px;
        ">
            <b>Runroute</b><br>
            <hr style="margin: 5px 0">
            Distance: {format_distance(path_distance(route))}<br>
            Difficulty: {details.difficulty.value}<br>
            Climb: {details.total_elevation_gain:.0f} m<br>
            Turns: {details.number_of_turns} ({details.sharp_turns} sharp)<br>
            Estimated time: {details.estimated_time/60:.0f} min
        </div>
        """
        m.get_root().html.add_child(folium.Element(legend_html))

    plugins.Fullscreen().add_to(m)
    plugins.LocateControl().add_to(m)
    return m
