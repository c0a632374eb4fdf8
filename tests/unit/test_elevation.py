from unittest.mock import MagicMock

import pytest
import requests

from runroute.elevation import ElevationError, OpenElevation, SimulatedElevation
from runroute.geo import offset_location


def response_for(results):
    response = MagicMock()
    response.json.return_value = {"results": results}
    return response


class TestSimulatedElevation:
    def test_deterministic(self, start):
        provider = SimulatedElevation()
        assert provider.elevation(start) == provider.elevation(start)

    def test_within_amplitude(self, start):
        provider = SimulatedElevation()
        for i in range(20):
            value = provider.elevation(offset_location(start, i * 137, i * 59))
            assert 50 <= value <= 150

    def test_many_matches_single(self, start):
        provider = SimulatedElevation()
        points = [start, offset_location(start, 300, 0)]
        assert provider.elevations(points) == [provider.elevation(p) for p in points]


class TestOpenElevation:
    def test_batches_requests(self, monkeypatch, start):
        calls = []

        def fake_get(url, params, timeout):
            batch = params["locations"].split("|")
            calls.append(batch)
            return response_for([{"elevation": float(len(calls))} for _ in batch])

        monkeypatch.setattr("runroute.elevation.requests.get", fake_get)
        points = [offset_location(start, i * 10, 0) for i in range(5)]
        elevations = OpenElevation(batch_size=2, pause=0).elevations(points)

        assert [len(batch) for batch in calls] == [2, 2, 1]
        assert calls[0][0] == f"{start.lat},{start.lon}"
        assert elevations == [1.0, 1.0, 2.0, 2.0, 3.0]

    def test_missing_value_is_zero(self, monkeypatch, start):
        monkeypatch.setattr("runroute.elevation.requests.get",
                            lambda url, params, timeout: response_for([{"elevation": None}]))
        assert OpenElevation(pause=0).elevation(start) == 0.0

    def test_count_mismatch(self, monkeypatch, start):
        monkeypatch.setattr("runroute.elevation.requests.get",
                            lambda url, params, timeout: response_for([]))
        with pytest.raises(ElevationError, match="Expected 1"):
            OpenElevation(pause=0).elevations([start])

    def test_request_failure(self, monkeypatch, start):
        def fail(url, params, timeout):
            raise requests.Timeout("timed out")

        monkeypatch.setattr("runroute.elevation.requests.get", fail)
        with pytest.raises(ElevationError, match="timed out"):
            OpenElevation(pause=0).elevations([start])

    def test_no_locations(self, monkeypatch):
        get = MagicMock()
        monkeypatch.setattr("runroute.elevation.requests.get", get)
        assert OpenElevation().elevations([]) == []
        get.assert_not_called()
