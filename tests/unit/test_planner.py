import random
import threading
import time

import pytest

from runroute.geo import offset_location
from runroute.models import Location, RouteStrategy
from runroute.planner import RoutePlanner, geometric_route, is_degenerate
from runroute.resolver import ROUTE_NOT_FOUND, SIMPLIFIED_ROUTE
from runroute.waypoints import WaypointGenerator


def make_planner(provider, seed=1, **kwargs):
    return RoutePlanner(provider, generator=WaypointGenerator(random.Random(seed)), **kwargs)


def tuples(locations):
    return [p.as_tuple() for p in locations]


class TestHelpers:
    def test_geometric_route(self, square_ring):
        coordinates = geometric_route(square_ring)
        assert len(coordinates) == 4 * 10
        assert coordinates[0].as_tuple() == square_ring[0].as_tuple()
        assert coordinates[-1].as_tuple() == square_ring[-1].as_tuple()

    def test_is_degenerate(self, start, square_ring):
        assert is_degenerate([start, start])
        assert is_degenerate([start, Location(lat=start.lat, lon=start.lon), start])
        assert not is_degenerate(square_ring)


class TestStartPlanning:
    def test_plans_a_closed_loop(self, start, directions):
        planner = make_planner(directions)
        planner.start_planning(start, 5000, refresh=False)
        assert planner.wait(timeout=5)

        assert planner.route_error is None
        assert not planner.is_loading
        assert len(planner.current_waypoints) == 6
        assert planner.current_waypoints[0].as_tuple() == start.as_tuple()
        assert planner.current_waypoints[-1].as_tuple() == start.as_tuple()
        assert len(planner.current_route) == 5 * directions.points
        assert len(planner.route_steps) == 5

    def test_strategy_changes_waypoint_count(self, start, directions):
        planner = make_planner(directions)
        planner.start_planning(start, 5000, RouteStrategy.SCENIC, refresh=False)
        planner.wait(timeout=5)
        assert len(planner.current_waypoints) == 8

    def test_periodic_refresh_replans(self, start, directions):
        planner = make_planner(directions, refresh_interval=0.05)
        planner.start_planning(start, 5000)
        planner.wait(timeout=5)
        first = tuples(planner.current_waypoints)

        deadline = time.time() + 5
        while len(directions.calls) <= 5 and time.time() < deadline:
            time.sleep(0.02)
        planner.stop_planning()
        planner.wait(timeout=5)

        assert len(directions.calls) > 5
        assert tuples(planner.current_waypoints)[0] == first[0]

    def test_stop_planning_keeps_route(self, start, directions):
        planner = make_planner(directions, refresh_interval=0.05)
        planner.start_planning(start, 5000)
        planner.wait(timeout=5)
        planner.stop_planning()
        assert planner.current_route

    def test_reset_clears_session(self, start, directions):
        planner = make_planner(directions)
        planner.start_planning(start, 5000, refresh=False)
        planner.wait(timeout=5)
        planner.reset()

        assert planner.start_location is None
        assert planner.current_route == []
        assert planner.current_waypoints == []
        assert planner.route_options == []
        assert planner.route_error is None


class TestResolutionOrdering:
    def test_newest_request_wins(self, start, square_ring, make_directions):
        gate = threading.Event()
        provider = make_directions(gate=gate)
        planner = make_planner(provider)

        older = [start, offset_location(start, 500, 0), offset_location(start, 500, 500),
                 Location(lat=start.lat, lon=start.lon)]
        first = planner._launch(older)
        planner.update_waypoints(square_ring)
        gate.set()
        first.join(timeout=5)
        planner.wait(timeout=5)

        assert first.cancelled
        assert tuples(planner.current_waypoints) == tuples(square_ring)

    def test_aborted_resolution_keeps_previous_route(self, start, square_ring, make_directions):
        provider = make_directions()
        planner = make_planner(provider)
        planner.start_planning(start, 5000, refresh=False)
        planner.wait(timeout=5)
        previous_route = tuples(planner.current_route)
        previous_waypoints = tuples(planner.current_waypoints)

        provider.fail_all = True
        assert planner.update_waypoints(square_ring)
        planner.wait(timeout=5)

        assert planner.route_error == ROUTE_NOT_FOUND
        assert tuples(planner.current_route) == previous_route
        assert tuples(planner.current_waypoints) == previous_waypoints
        assert not planner.is_loading


class TestRouteOptions:
    def test_one_option_per_strategy_in_order(self, start, directions):
        planner = make_planner(directions)
        options = planner.generate_options(start, 5000)

        assert [o.strategy for o in options] == list(RouteStrategy)
        assert not planner.is_generating_options
        assert planner.route_options == options
        for option in options:
            assert option.waypoint_count == len(option.waypoints) - 2
            assert option.complexity == option.complexity_for(option.waypoint_count)
            assert option.estimated_distance > 0

    def test_balanced_is_selected(self, start, directions):
        planner = make_planner(directions)
        options = planner.generate_options(start, 5000)

        assert planner.selected_option is options[0]
        assert planner.strategy is RouteStrategy.BALANCED
        assert tuples(planner.current_waypoints) == tuples(options[0].waypoints)
        assert tuples(planner.current_route) == tuples(options[0].route.coordinates)

    def test_options_are_repeatable_with_a_seed(self, start, make_directions):
        a = make_planner(make_directions(), seed=3).generate_options(start, 6000)
        b = make_planner(make_directions(), seed=3).generate_options(start, 6000)
        assert [tuples(o.waypoints) for o in a] == [tuples(o.waypoints) for o in b]

    def test_unresolvable_options_fall_back_to_straight_lines(self, start, make_directions):
        planner = make_planner(make_directions(fail_all=True))
        options = planner.generate_options(start, 5000)

        assert len(options) == 4
        for option in options:
            assert option.route.error == SIMPLIFIED_ROUTE
            assert len(option.route.coordinates) == (len(option.waypoints) - 1) * 10
        assert planner.route_error == SIMPLIFIED_ROUTE

    def test_degenerate_target_yields_no_options(self, start, directions):
        planner = make_planner(directions)
        assert planner.generate_options(start, 0) == []
        assert planner.selected_option is None
        assert directions.calls == []

    def test_select_option(self, start, directions):
        planner = make_planner(directions)
        options = planner.generate_options(start, 5000)
        planner.select_option(options[2])

        assert planner.selected_option is options[2]
        assert planner.strategy is RouteStrategy.DIRECT
        assert tuples(planner.current_waypoints) == tuples(options[2].waypoints)


class TestEditing:
    @pytest.fixture
    def planner(self, start, directions):
        planner = make_planner(directions)
        planner.start_planning(start, 5000, refresh=False)
        planner.wait(timeout=5)
        return planner

    def test_toggle_direction_reverses(self, planner):
        route = tuples(planner.current_route)
        waypoints = tuples(planner.current_waypoints)
        planner.toggle_direction()
        assert tuples(planner.current_route) == route[::-1]
        assert tuples(planner.current_waypoints) == waypoints[::-1]

    def test_toggle_direction_twice_restores(self, planner):
        route = tuples(planner.current_route)
        planner.toggle_direction()
        planner.toggle_direction()
        assert tuples(planner.current_route) == route

    def test_update_waypoints_rejects_short_rings(self, planner, start):
        route = tuples(planner.current_route)
        assert not planner.update_waypoints([start, offset_location(start, 100, 0)])
        assert tuples(planner.current_route) == route

    def test_update_waypoints(self, planner, square_ring):
        assert planner.update_waypoints(square_ring)
        planner.wait(timeout=5)
        assert tuples(planner.current_waypoints) == tuples(square_ring)

    def test_insert_waypoint_before_closing_anchor(self, planner, start):
        before = len(planner.current_waypoints)
        extra = offset_location(start, -200, -200)
        assert planner.insert_waypoint(extra)
        planner.wait(timeout=5)
        assert len(planner.current_waypoints) == before + 1
        assert planner.current_waypoints[-2].as_tuple() == extra.as_tuple()
        assert planner.current_waypoints[-1].as_tuple() == start.as_tuple()

    def test_remove_waypoint(self, planner):
        before = tuples(planner.current_waypoints)
        assert planner.remove_waypoint(2)
        planner.wait(timeout=5)
        assert tuples(planner.current_waypoints) == before[:2] + before[3:]

    def test_remove_waypoint_refuses_anchors(self, planner):
        last = len(planner.current_waypoints) - 1
        assert not planner.remove_waypoint(0)
        assert not planner.remove_waypoint(last)

    def test_remove_waypoint_keeps_minimum(self, planner, start):
        ring = [start, offset_location(start, 300, 0), Location(lat=start.lat, lon=start.lon)]
        planner.update_waypoints(ring)
        planner.wait(timeout=5)
        assert not planner.remove_waypoint(1)

    def test_regenerate_with_more_waypoints(self, planner):
        planner.regenerate(8)
        planner.wait(timeout=5)
        assert len(planner.current_waypoints) == 10

    def test_get_state(self, planner):
        state = planner.get_state()
        assert state["waypoints"] == 6
        assert state["strategy"] == "Balanced"
        assert state["route_distance"] > 0
        assert state["is_loading"] is False


class SlowGenerator(WaypointGenerator):
    """Signals each generation, then takes a while over it"""

    def __init__(self, rng, delay):
        super().__init__(rng)
        self.delay = delay
        self.entered = []

    def generate(self, *args, **kwargs):
        self.entered.append(time.time())
        time.sleep(self.delay)
        return super().generate(*args, **kwargs)


class TestStopping:
    def test_reset_during_refresh_publishes_nothing(self, start, directions):
        generator = SlowGenerator(random.Random(1), delay=0.2)
        planner = RoutePlanner(directions, generator=generator, refresh_interval=0.05)
        planner.start_planning(start, 5000)
        planner.wait(timeout=5)

        deadline = time.time() + 5
        while len(generator.entered) < 2 and time.time() < deadline:
            time.sleep(0.01)
        planner.reset()
        time.sleep(0.4)
        planner.wait(timeout=5)

        assert planner.current_route == []
        assert planner.current_waypoints == []
        assert not planner.is_loading

    def test_stop_planning_waits_for_refresh(self, start, directions):
        generator = SlowGenerator(random.Random(1), delay=0.2)
        planner = RoutePlanner(directions, generator=generator, refresh_interval=0.05)
        planner.start_planning(start, 5000)
        planner.wait(timeout=5)

        deadline = time.time() + 5
        while len(generator.entered) < 2 and time.time() < deadline:
            time.sleep(0.01)
        calls = len(directions.calls)
        planner.stop_planning()
        time.sleep(0.3)

        assert len(generator.entered) == 2
        assert len(directions.calls) == calls


class TestWaypointCountOverride:
    def test_new_session_uses_strategy_count(self, start, directions):
        planner = make_planner(directions)
        planner.start_planning(start, 5000, refresh=False)
        planner.wait(timeout=5)
        planner.regenerate(10)
        planner.wait(timeout=5)
        assert len(planner.current_waypoints) == 12

        planner.start_planning(start, 5000, refresh=False)
        planner.wait(timeout=5)
        assert planner.waypoint_count is None
        assert len(planner.current_waypoints) == 6

    def test_options_use_strategy_counts(self, start, directions):
        planner = make_planner(directions)
        planner.start_planning(start, 5000, refresh=False)
        planner.wait(timeout=5)
        planner.regenerate(10)
        planner.wait(timeout=5)

        options = planner.generate_options(start, 5000)
        assert [o.waypoint_count for o in options] == [4, 6, 3, 5]


class TestToggleWhileResolving:
    def test_pending_route_arrives_reversed(self, start, square_ring, directions, make_directions):
        planner = make_planner(directions)
        planner.start_planning(start, 5000, refresh=False)
        planner.wait(timeout=5)

        reference = make_planner(make_directions())
        reference.update_waypoints(square_ring)
        reference.wait(timeout=5)

        directions.gate = threading.Event()
        planner.update_waypoints(square_ring)
        planner.toggle_direction()
        directions.gate.set()
        planner.wait(timeout=5)

        assert tuples(planner.current_waypoints) == tuples(square_ring)[::-1]
        assert tuples(planner.current_route) == tuples(reference.current_route)[::-1]
        assert [s.instruction for s in planner.route_steps] == \
            [s.instruction for s in reference.route_steps][::-1]

    def test_toggling_twice_while_resolving_keeps_direction(self, square_ring, directions, start):
        planner = make_planner(directions)
        directions.gate = threading.Event()
        planner.update_waypoints(square_ring)
        planner.toggle_direction()
        planner.toggle_direction()
        directions.gate.set()
        planner.wait(timeout=5)

        assert tuples(planner.current_waypoints) == tuples(square_ring)
