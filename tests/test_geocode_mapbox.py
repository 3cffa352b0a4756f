import pytest
from aiohttp import web
from aiohttp import test_utils
from geopy.adapters import AioHTTPAdapter
from geopy.geocoders import MapBox

from air_dashboard.geocode import City, GeocodeResolver
from air_dashboard.stations import Station


def feature(name, latitude=50.08, longitude=14.42):
    return {
        "type": "Feature",
        "place_name": name,
        "geometry": {"type": "Point", "coordinates": [longitude, latitude]},
    }


PRAGUE_COLLECTION = {
    "type": "FeatureCollection",
    "features": [
        feature("Karlova 1, 110 00 Prague, Czechia"),
        feature("110 00, Prague, Czechia"),
        feature("Prague, Czechia"),
        feature("Prague, Czechia"),
        feature("Czechia"),
    ],
}


@pytest.fixture
async def mapbox():
    """A real Mapbox geocoder talking to a local server; returns (geocoder, reply)."""
    reply = {"body": PRAGUE_COLLECTION, "status": 200, "queries": []}

    async def reverse_geocode(request):
        reply["queries"].append(dict(request.query))
        return web.json_response(reply["body"], status=reply["status"])

    app = web.Application()
    app.router.add_get("/{tail:.*}", reverse_geocode)
    server = test_utils.TestServer(app, host="127.0.0.1")
    await server.start_server()

    async with MapBox(
        api_key="test-token",
        scheme="http",
        domain=f"127.0.0.1:{server.port}",
        adapter_factory=AioHTTPAdapter,
    ) as geocoder:
        yield geocoder, reply

    await server.close()


async def test_city_level_place_name_is_extracted(mapbox):
    geocoder, reply = mapbox

    city = await GeocodeResolver(geocoder=geocoder, min_delay_seconds=0).resolve_city(50.08, 14.42, 37)

    assert city == City("Prague, Czechia", 37)
    assert reply["queries"][0]["access_token"] == "test-token"


@pytest.mark.parametrize(
    "body",
    [
        {"type": "FeatureCollection", "message": "odd"},
        {"type": "FeatureCollection", "features": [{"place_name": "No geometry"}] * 3},
        {"type": "FeatureCollection", "features": "none"},
        {"type": "FeatureCollection", "features": []},
        [],
    ],
)
async def test_malformed_response_skips_station(mapbox, body):
    geocoder, reply = mapbox
    reply["body"] = body

    cities = await GeocodeResolver(geocoder=geocoder, min_delay_seconds=0).resolve_cities(
        [Station("1", 1.0, 2.0, 50)]
    )

    assert cities == []


async def test_rejected_token_skips_station(mapbox):
    geocoder, reply = mapbox
    reply["body"] = {"message": "Not Authorized - Invalid Token"}
    reply["status"] = 401

    resolver = GeocodeResolver(geocoder=geocoder, min_delay_seconds=0)

    assert await resolver.resolve_city(1.0, 2.0, 50) is None
