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
User location resolution
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Protocol

from air_dashboard import const
from air_dashboard.exceptions import GeolocationUnavailableError, LocationAlreadyResolvedError
from air_dashboard.gateway import FetchGateway

_LOGGER = logging.getLogger(__name__)

@dataclass(frozen=True)
class UserLocation:
    """Coordinates of the user's current position."""

    latitude: float
    longitude: float


class LocationProvider(Protocol):
    """A device capability that can report the current position."""

    async def current_position(self) -> tuple[float, float]:
        """
        Get the current (latitude, longitude).

        :raises GeolocationUnavailableError: If the position cannot be determined
        """


class LocationContext:
    """
    Holds the user location for one session.

    The location is written at most once and is read-only afterwards.
    Consumers must treat it as optional.
    """

    def __init__(self):
        self._location: UserLocation | None = None
        self._settled = False

    @property
    def location(self) -> UserLocation | None:
        """Get the resolved location, or None if it is unknown."""
        return self._location

    @property
    def settled(self) -> bool:
        """Whether location resolution has finished, successfully or not."""
        return self._settled

    def store(self, location: UserLocation) -> None:
        """
        Store the resolved location.

        :raises LocationAlreadyResolvedError: If a location was already stored
        """
        if self._location is not None:
            raise LocationAlreadyResolvedError(
                f"User location is already set to {self._location}"
            )
        self._location = location

    def mark_settled(self) -> None:
        self._settled = True


class IpGeolocationProvider:
    """Approximates the current position from the public IP address."""

    def __init__(self, gateway: FetchGateway, url: str = const.IP_GEOLOCATION_URL):
        self._gateway = gateway
        self._url = url

    async def current_position(self) -> tuple[float, float]:
        payload = await self._gateway.fetch(self._url)

        if not isinstance(payload, dict) or payload.get("success") is False:
            raise GeolocationUnavailableError("IP geolocation lookup returned no position")

        try:
            return float(payload["latitude"]), float(payload["longitude"])
        except (KeyError, TypeError, ValueError) as exc:
            raise GeolocationUnavailableError(
                f"IP geolocation response has no usable coordinates: {exc}"
            ) from exc


class LocationService:
    """Resolves the user's location once and publishes it to a LocationContext."""

    def __init__(
        self,
        context: LocationContext,
        provider: LocationProvider | None = None,
        timeout: float = const.GEOLOCATION_TIMEOUT,
    ):
        """
        Initialize the LocationService.

        :param context: Context receiving the resolved location
        :type context: LocationContext
        :param provider: Geolocation capability, None if the device has none
        :type provider: LocationProvider, optional
        :param timeout: Seconds to wait for the provider before giving up
        :type timeout: float
        """
        self._context = context
        self._provider = provider
        self._timeout = timeout
        self._attempted = False

    @property
    def context(self) -> LocationContext:
        return self._context


    async def resolve_user_location(self) -> None:
        """
        Request the current position from the provider.

        Only the first call queries the provider. Failures are logged and
        leave the location absent.
        """
        if self._attempted:
            return
        self._attempted = True

        try:
            latitude, longitude = await self._request_position()
        except GeolocationUnavailableError as exc:
            _LOGGER.warning("User location unavailable: %s", exc)
        except Exception as exc:
            _LOGGER.warning("Location provider failed: %s", exc)
        else:
            self._context.store(UserLocation(latitude, longitude))
            _LOGGER.info("User location resolved to %.4f, %.4f.", latitude, longitude)
        finally:
            self._context.mark_settled()


    async def _request_position(self) -> tuple[float, float]:
        if self._provider is None:
            raise GeolocationUnavailableError("No geolocation capability available")

        try:
            return await asyncio.wait_for(
                self._provider.current_position(),
                timeout=self._timeout
            )
        except asyncio.TimeoutError as exc:
            raise GeolocationUnavailableError(
                f"Geolocation did not answer within {self._timeout} s"
            ) from exc
