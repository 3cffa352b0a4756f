import logging

import pytest

from air_dashboard.exceptions import GeolocationUnavailableError, LocationAlreadyResolvedError
from air_dashboard.gateway import FetchGateway
from air_dashboard.location import (
    IpGeolocationProvider,
    LocationContext,
    LocationService,
    UserLocation,
)
from air_dashboard import const
from tests.stubs import StubLocationProvider, StubResponse, StubSession


async def test_successful_position_is_stored():
    context = LocationContext()
    provider = StubLocationProvider(position=(59.93, 30.36))

    await LocationService(context, provider).resolve_user_location()

    assert context.location == UserLocation(59.93, 30.36)
    assert context.settled


async def test_provider_error_leaves_location_absent(caplog):
    context = LocationContext()
    provider = StubLocationProvider(error=GeolocationUnavailableError("User denied Geolocation"))

    with caplog.at_level(logging.WARNING, logger="air_dashboard.location"):
        await LocationService(context, provider).resolve_user_location()

    assert context.location is None
    assert context.settled
    assert "User denied Geolocation" in caplog.text


async def test_missing_capability_is_treated_as_failure():
    context = LocationContext()

    await LocationService(context, None).resolve_user_location()

    assert context.location is None
    assert context.settled


async def test_slow_provider_is_treated_as_failure():
    context = LocationContext()
    provider = StubLocationProvider(position=(1.0, 2.0), delay=1.0)

    await LocationService(context, provider, timeout=0.05).resolve_user_location()

    assert context.location is None


async def test_provider_is_queried_at_most_once():
    context = LocationContext()
    provider = StubLocationProvider(position=(1.0, 2.0))
    service = LocationService(context, provider)

    await service.resolve_user_location()
    await service.resolve_user_location()

    assert provider.calls == 1
    assert context.location == UserLocation(1.0, 2.0)


def test_location_is_written_once():
    context = LocationContext()
    context.store(UserLocation(1.0, 2.0))

    with pytest.raises(LocationAlreadyResolvedError):
        context.store(UserLocation(3.0, 4.0))

    assert context.location == UserLocation(1.0, 2.0)


async def test_ip_geolocation_provider():
    session = StubSession({
        const.IP_GEOLOCATION_URL: StubResponse({"success": True, "latitude": 48.14, "longitude": 17.11}),
    })
    provider = IpGeolocationProvider(FetchGateway(session=session))

    assert await provider.current_position() == (48.14, 17.11)


@pytest.mark.parametrize(
    "outcome",
    [
        StubResponse({"success": False, "message": "Reserved range"}),
        StubResponse({"success": True, "latitude": None}),
        StubResponse(status=429),
    ],
)
async def test_ip_geolocation_provider_failures(outcome):
    session = StubSession({const.IP_GEOLOCATION_URL: outcome})
    provider = IpGeolocationProvider(FetchGateway(session=session))

    with pytest.raises(GeolocationUnavailableError):
        await provider.current_position()


@pytest.mark.parametrize(
    "error",
    [OSError("Location service not running"), PermissionError("location permission denied")],
)
async def test_unexpected_provider_error_leaves_location_absent(error, caplog):
    context = LocationContext()
    provider = StubLocationProvider(error=error)

    with caplog.at_level(logging.WARNING, logger="air_dashboard.location"):
        await LocationService(context, provider).resolve_user_location()

    assert context.location is None
    assert context.settled
    assert str(error) in caplog.text
