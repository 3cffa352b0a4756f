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
Dirtiest and cleanest city tables
"""

import logging
from dataclasses import dataclass, field

from air_dashboard import const
from air_dashboard.gateway import FetchGateway
from air_dashboard.geocode import City, GeocodeResolver
from air_dashboard.stations import parse_stations, rank_stations

_LOGGER = logging.getLogger(__name__)

@dataclass(frozen=True)
class TableData:
    """Ranked city lists for the pollution table."""

    dirty_cities: list[City] = field(default_factory=list)
    clean_cities: list[City] = field(default_factory=list)

    def to_dict(self) -> dict:
        """Get the table as [name, aqi] rows keyed by list."""
        return {
            "dirtyCities": [[city.display_name, city.aqi] for city in self.dirty_cities],
            "cleanCities": [[city.display_name, city.aqi] for city in self.clean_cities],
        }


class TableDataAssembler:
    """Builds the dirtiest-N and cleanest-N city lists from the station index."""

    def __init__(
        self,
        gateway: FetchGateway,
        resolver: GeocodeResolver,
        stations_url: str = const.WAQI_STATIONS_URL.format(token=const.WAQI_TOKEN),
        fallback: str | None = const.STATIONS_FALLBACK,
    ):
        self._gateway = gateway
        self._resolver = resolver
        self._stations_url = stations_url
        self._fallback = fallback


    async def build_table_data(self) -> TableData:
        """
        Fetch all stations and resolve the most and least polluted cities.

        :return: Dirty cities by descending AQI, clean cities by ascending AQI
        :rtype: TableData
        """
        payload = await self._gateway.fetch(self._stations_url, self._fallback)
        if payload is None:
            _LOGGER.error("No station data available. Returning empty tables.")
            return TableData()

        stations = rank_stations(parse_stations(payload))

        dirty_cities = await self._resolver.resolve_cities(reversed(stations))
        clean_cities = await self._resolver.resolve_cities(stations)

        return TableData(dirty_cities, clean_cities)
