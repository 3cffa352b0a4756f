import pytest
from geopy.exc import GeocoderServiceError

from tests.stubs import StubGeocoder, StubSession


@pytest.fixture
def stub_session():
    return StubSession()


@pytest.fixture
def stub_geocoder():
    return StubGeocoder()


@pytest.fixture
def geocoder_error():
    return GeocoderServiceError("Rate limit exceeded")
