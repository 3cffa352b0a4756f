"""
Network stand-ins shared by the tests
"""

import asyncio
import json

import aiohttp
from geopy.location import Location


class StubResponse:
    """Canned response for a StubSession route."""

    def __init__(self, payload=None, status=200, delay=0.0, invalid_json=False):
        self.payload = payload
        self.status = status
        self.delay = delay
        self.invalid_json = invalid_json

    async def json(self, content_type="application/json"):
        if self.invalid_json:
            raise json.JSONDecodeError("Expecting value", "<html>", 0)
        return self.payload


class _StubRequest:
    def __init__(self, outcome):
        self._outcome = outcome

    async def __aenter__(self):
        if isinstance(self._outcome, BaseException):
            raise self._outcome
        if self._outcome.delay:
            await asyncio.sleep(self._outcome.delay)
        return self._outcome

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        return False


class StubSession:
    """
    Stands in for aiohttp.ClientSession.

    Routes map a URL, or a prefix of it, to a StubResponse or an exception.
    Unknown URLs fail with a connection error.
    """

    def __init__(self, routes=None):
        self.routes = dict(routes or {})
        self.requested = []
        self.request_options = {}
        self.closed = False

    def get(self, url, **kwargs):
        self.requested.append(url)
        self.request_options[url] = kwargs
        return _StubRequest(self._outcome(url))

    def _outcome(self, url):
        if url in self.routes:
            return self.routes[url]
        for prefix, outcome in self.routes.items():
            if url.startswith(prefix):
                return outcome
        return aiohttp.ClientConnectionError(f"No route to {url}")

    async def close(self):
        self.closed = True


def place_hierarchy(city):
    """Feature names as returned by a reverse lookup, most specific first."""
    return [f"1 Main Street, {city}", f"Old Town, {city}", city, "Some Region", "Some Country"]


class StubGeocoder:
    """
    Async geocoder answering reverse lookups from a table.

    ``places`` maps (lat, lon) to a list of feature names or an exception.
    Unknown coordinates resolve to a hierarchy named after the coordinates.
    """

    def __init__(self, places=None):
        self.places = dict(places or {})
        self.queries = []
        self.closed = False

    async def reverse(self, query, *, exactly_one=True, timeout=None):
        self.queries.append(tuple(query))
        answer = self.places.get(tuple(query))
        if answer is None:
            answer = place_hierarchy(f"City {query[0]:g} {query[1]:g}")
        if isinstance(answer, BaseException):
            raise answer
        if not answer:
            return None

        locations = [Location(name, (query[0], query[1]), {"place_name": name}) for name in answer]
        return locations if not exactly_one else locations[0]

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        self.closed = True


class StubLocationProvider:
    def __init__(self, position=None, error=None, delay=0.0):
        self.position = position
        self.error = error
        self.delay = delay
        self.calls = 0

    async def current_position(self):
        self.calls += 1
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return self.position


def station_payload(readings):
    """WAQI map payload from (lat, lon, aqi) triples."""
    return {
        "status": "ok",
        "data": [
            {"lat": lat, "lon": lon, "uid": index, "aqi": aqi, "station": {"name": f"Station {index}"}}
            for index, (lat, lon, aqi) in enumerate(readings)
        ],
    }
