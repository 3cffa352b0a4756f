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
Exceptions raised inside the data-acquisition layer
"""


class AirDashboardError(Exception):
    """Base exception for the air-dashboard-data library."""

class FetchError(AirDashboardError):
    """Raised when a JSON document cannot be retrieved."""

class FetchTimeoutError(FetchError):
    """Raised when a request does not complete within its timeout."""

class HttpStatusError(FetchError):
    """Raised when the server answers with a non-2xx status code."""

    def __init__(self, status: int, url: str):
        super().__init__(f"HTTP error {status} for {url}")
        self.status = status
        self.url = url

class ProviderStatusError(FetchError):
    """Raised when the provider reports an error status inside a 2xx response."""

    def __init__(self, status, url: str):
        super().__init__(f"Provider status {status!r} for {url}")
        self.status = status
        self.url = url

class PayloadParseError(FetchError):
    """Raised when a response body is not a usable JSON document."""

class GeolocationUnavailableError(AirDashboardError):
    """Raised when the current position cannot be determined."""

class GeocodeLookupError(AirDashboardError):
    """Raised when coordinates cannot be resolved to a place name."""

class LocationAlreadyResolvedError(AirDashboardError):
    """Raised when the user location is written a second time."""
