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
Air Dashboard data client
"""

import logging
from dataclasses import dataclass

import aiohttp

from air_dashboard import const
from air_dashboard.gateway import FetchGateway
from air_dashboard.geocode import GeocodeResolver
from air_dashboard.history import ChartData, HistoryAssembler
from air_dashboard.location import LocationContext, LocationProvider, LocationService, UserLocation
from air_dashboard.table import TableData, TableDataAssembler

_LOGGER = logging.getLogger(__name__)

@dataclass(frozen=True)
class DashboardData:
    """Everything the dashboard renders for one request cycle."""

    table: TableData
    chart: ChartData
    user_location: UserLocation | None

    def to_dict(self) -> dict:
        location = self.user_location
        return {
            **self.table.to_dict(),
            **self.chart.to_dict(),
            "userLocation": (
                {"latitude": location.latitude, "longitude": location.longitude}
                if location else None
            ),
        }


class AirDashboard:
    """
    A client assembling air quality tables and charts from WAQI,
    OpenWeather and Mapbox, with bundled fallbacks for failed requests.

    Use as an async context manager so HTTP sessions are released.
    """

    def __init__(
        self,
        location_provider: LocationProvider | None = None,
        session: aiohttp.ClientSession | None = None,
        geocoder=None,
        waqi_token: str = const.WAQI_TOKEN,
        openweather_token: str = const.OPENWEATHER_TOKEN,
        mapbox_token: str = const.MAPBOX_TOKEN,
        reference_city: str = const.REFERENCE_CITY,
        request_timeout: float = const.REQUEST_TIMEOUT,
        geolocation_timeout: float = const.GEOLOCATION_TIMEOUT,
        geocode_timeout: float = const.GEOCODE_TIMEOUT,
        geocode_min_delay: float = const.GEOCODE_MIN_DELAY,
    ):
        """
        Initialize the Air Dashboard client.

        :param location_provider: Geolocation capability; without one the reference city is used
        :type location_provider: LocationProvider, optional
        :param session: Shared aiohttp session for provider requests
        :type session: aiohttp.ClientSession, optional
        :param geocoder: Async geopy geocoder replacing the default Mapbox one
        :param waqi_token: WAQI API token
        :type waqi_token: str
        :param openweather_token: OpenWeather API key
        :type openweather_token: str
        :param mapbox_token: Mapbox access token
        :type mapbox_token: str
        :param reference_city: WAQI city slug for the current snapshot
        :type reference_city: str
        :param request_timeout: Primary request timeout in seconds
        :type request_timeout: float
        :param geolocation_timeout: Seconds to wait for the location provider
        :type geolocation_timeout: float
        :param geocode_timeout: Geocoding timeout in seconds
        :type geocode_timeout: float
        :param geocode_min_delay: Minimum delay between geocoding requests in seconds
        :type geocode_min_delay: float
        """
        self._gateway = FetchGateway(session=session, request_timeout=request_timeout)
        self._location_context = LocationContext()
        self._location_service = LocationService(
            self._location_context,
            location_provider,
            timeout=geolocation_timeout,
        )
        self._resolver = GeocodeResolver(
            geocoder=geocoder,
            api_key=mapbox_token,
            geocode_timeout=geocode_timeout,
            min_delay_seconds=geocode_min_delay,
        )
        self._table_assembler = TableDataAssembler(
            self._gateway,
            self._resolver,
            stations_url=const.WAQI_STATIONS_URL.format(token=waqi_token),
        )
        self._history_assembler = HistoryAssembler(
            self._gateway,
            self._location_context,
            snapshot_url=const.WAQI_FEED_URL.format(city=reference_city, token=waqi_token),
            history_token=openweather_token,
        )


    async def __aenter__(self) -> "AirDashboard":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()


    @property
    def gateway(self) -> FetchGateway:
        """Get the gateway shared by all assemblers."""
        return self._gateway

    @property
    def user_location(self) -> UserLocation | None:
        """
        The user's location, if resolved.

        :rtype: UserLocation | None
        """
        return self._location_context.location

    @property
    def last_fetch_status(self) -> str:
        """
        Status message from the last fetch.

        :rtype: str
        """
        return self._gateway.last_fetch_status


    async def close(self) -> None:
        """Release HTTP sessions owned by the client."""
        await self._resolver.close()
        await self._gateway.close()


    async def resolve_user_location(self) -> None:
        """Resolve the user's location; only the first call queries the provider."""
        await self._location_service.resolve_user_location()


    async def build_table_data(self) -> TableData:
        """
        Get the dirtiest and cleanest cities.

        :rtype: TableData
        """
        return await self._table_assembler.build_table_data()


    async def build_chart_data(self) -> ChartData:
        """
        Get the pollution history around the user and the current snapshot.

        :rtype: ChartData
        """
        return await self._history_assembler.build_chart_data()


    async def refresh(self) -> DashboardData:
        """
        Run one request cycle: location first, then table and chart.

        :return: Shaped data for the presentation layer
        :rtype: DashboardData
        """
        await self.resolve_user_location()

        table = await self.build_table_data()
        chart = await self.build_chart_data()

        _LOGGER.info(
            "Dashboard refreshed: %d dirty, %d clean cities, %d history points.",
            len(table.dirty_cities),
            len(table.clean_cities),
            len(chart.chart_data),
        )
        return DashboardData(table, chart, self.user_location)
