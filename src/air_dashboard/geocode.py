#  Provides the data-acquisition layer of an air quality dashboard:
#  ranked city pollution tables and pollution history with local fallbacks.
#  Copyright (C) 2025 chickendrop89

#  This library is free software; you can redistribute it and/or modify it
#  under the terms of the GNU Lesser General Public License as published by
#  the Free Software Foundation; either version 3 of the License, or
#  (at your option) any later version.

#  This library is distributed in the hope that it will be useful,
#  but WITHOUT ANY WARRANTY; without even the implied warranty of
#  MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
#  GNU Lesser General Public License for more details.

"""
Reverse geocoding of stations into named cities
"""

import logging
from collections.abc import Iterable
from dataclasses import dataclass

from geopy.adapters import AioHTTPAdapter
from geopy.exc import GeopyError
from geopy.extra.rate_limiter import AsyncRateLimiter
from geopy.geocoders import MapBox

from air_dashboard import const
from air_dashboard.exceptions import GeocodeLookupError
from air_dashboard.stations import Station

_LOGGER = logging.getLogger(__name__)

@dataclass(frozen=True)
class City:
    """A named place with the AQI of the station it was resolved from."""

    display_name: str
    aqi: int


class GeocodeResolver:
    """
    Resolves station coordinates to city names.

    Lookups are issued one at a time with a minimum delay between them,
    so at most one request is outstanding against the geocoding provider.
    """

    def __init__(
        self,
        geocoder=None,
        api_key: str = const.MAPBOX_TOKEN,
        geocode_timeout: float = const.GEOCODE_TIMEOUT,
        min_delay_seconds: float = const.GEOCODE_MIN_DELAY,
        max_cities: int = const.MAX_RANKED_CITIES,
    ):
        """
        Initialize the GeocodeResolver.

        :param geocoder: Async geopy geocoder; a Mapbox geocoder is created if omitted
        :param api_key: Mapbox access token
        :type api_key: str
        :param geocode_timeout: Geocoding timeout in seconds
        :type geocode_timeout: float
        :param min_delay_seconds: Minimum delay between two lookups
        :type min_delay_seconds: float
        :param max_cities: Maximum number of cities per resolved list
        :type max_cities: int
        """
        self._owns_geocoder = geocoder is None
        self._geocoder = geocoder or MapBox(
            api_key=api_key,
            user_agent=const.USER_AGENT,
            adapter_factory=AioHTTPAdapter,
        )
        self._geocode_timeout = geocode_timeout
        self._max_cities = max_cities

        # Errors are handled per station below, no retries
        self._rate_limited_reverse = AsyncRateLimiter(
            self._geocoder.reverse,
            min_delay_seconds=min_delay_seconds,
            max_retries=0,
            swallow_exceptions=False,
        )


    async def close(self) -> None:
        """Release the geocoder's HTTP session if it was created here."""
        if self._owns_geocoder:
            await self._geocoder.__aexit__(None, None, None)


    async def resolve_city(self, latitude: float, longitude: float, aqi: int) -> City | None:
        """
        Resolve one station to a city.

        :param latitude: Station latitude
        :type latitude: float
        :param longitude: Station longitude
        :type longitude: float
        :param aqi: Station AQI, carried over to the city
        :type aqi: int
        :return: Resolved city, or None if the lookup failed
        :rtype: City | None
        """
        try:
            name = await self._lookup_place_name(latitude, longitude)
        except GeocodeLookupError as exc:
            _LOGGER.warning("Skipping station at %s, %s: %s", latitude, longitude, exc)
            return None

        return City(name, aqi)


    async def resolve_cities(self, stations: Iterable[Station]) -> list[City]:
        """
        Resolve stations in order until enough unique cities are collected.

        Failed lookups and duplicate (name, aqi) pairs are skipped. A shorter
        list is returned when the stations run out first.

        :param stations: Stations in the desired ranking order
        :type stations: Iterable[Station]
        :return: Up to max_cities unique cities, in station order
        :rtype: list[City]
        """
        cities: list[City] = []

        for station in stations:
            city = await self.resolve_city(station.latitude, station.longitude, station.aqi)

            if city is None or city in cities:
                continue

            cities.append(city)
            if len(cities) >= self._max_cities:
                break

        _LOGGER.info("Resolved %d cities.", len(cities))
        return cities


    async def _lookup_place_name(self, latitude: float, longitude: float) -> str:
        """
        Get the city-level place name for coordinates.

        :raises GeocodeLookupError: On provider errors or an incomplete hierarchy
        """
        try:
            locations = await self._rate_limited_reverse(
                (latitude, longitude),
                exactly_one=False,
                timeout=self._geocode_timeout,
            )
        except GeopyError as exc:
            raise GeocodeLookupError(f"Geocoding service error: {exc}") from exc
        except (KeyError, TypeError, IndexError, AttributeError) as exc:
            # geopy parses the response body without shape checks
            raise GeocodeLookupError(f"Unexpected geocoder response: {exc!r}") from exc

        if not locations or len(locations) <= const.CITY_FEATURE_INDEX:
            raise GeocodeLookupError("Geocoder returned no city-level place")

        name = locations[const.CITY_FEATURE_INDEX].address
        if not name:
            raise GeocodeLookupError("Geocoder returned an unnamed place")

        return name
