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
Provides the data-acquisition layer of an air quality dashboard:
ranked city pollution tables and pollution history with local fallbacks.
"""

__version__ = "1.0.0"

from .exceptions import (
    AirDashboardError,
    FetchError,
    FetchTimeoutError,
    HttpStatusError,
    ProviderStatusError,
    PayloadParseError,
    GeolocationUnavailableError,
    GeocodeLookupError,
    LocationAlreadyResolvedError,
)
from .gateway import FetchGateway
from .location import (
    IpGeolocationProvider,
    LocationContext,
    LocationProvider,
    LocationService,
    UserLocation,
)
from .stations import Station
from .geocode import City, GeocodeResolver
from .table import TableData, TableDataAssembler
from .history import ChartData, HistoryAssembler, HistoryPoint, PollutionSnapshot
from .dashboard import AirDashboard, DashboardData

__all__ = [
    "AirDashboard",
    "DashboardData",
    "FetchGateway",
    "LocationContext",
    "LocationProvider",
    "LocationService",
    "IpGeolocationProvider",
    "UserLocation",
    "Station",
    "City",
    "GeocodeResolver",
    "TableData",
    "TableDataAssembler",
    "ChartData",
    "HistoryAssembler",
    "HistoryPoint",
    "PollutionSnapshot",
    "AirDashboardError",
    "FetchError",
    "FetchTimeoutError",
    "HttpStatusError",
    "ProviderStatusError",
    "PayloadParseError",
    "GeolocationUnavailableError",
    "GeocodeLookupError",
    "LocationAlreadyResolvedError",
    "__version__",
]
