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
Current pollution snapshot and its recent history
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any
from urllib.parse import urlencode

from air_dashboard import const
from air_dashboard.gateway import FetchGateway
from air_dashboard.location import LocationContext
from air_dashboard.stations import parse_aqi

_LOGGER = logging.getLogger(__name__)

@dataclass(frozen=True)
class HistoryPoint:
    """A pollution reading at a point in time."""

    timestamp: datetime
    aqi: int
    components: dict = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "dt": int(self.timestamp.timestamp()),
            "aqi": self.aqi,
            "components": dict(self.components),
        }


@dataclass(frozen=True)
class PollutionSnapshot:
    """The current reading of the reference city."""

    city_name: str | None
    latitude: float | None
    longitude: float | None
    aqi: int | None
    observed_at: datetime | None
    raw: dict = field(default_factory=dict, compare=False, repr=False)

    @property
    def coordinates(self) -> tuple[float, float] | None:
        if self.latitude is None or self.longitude is None:
            return None
        return self.latitude, self.longitude


@dataclass(frozen=True)
class ChartData:
    """History readings and the current snapshot for the pollution chart."""

    chart_data: list[HistoryPoint] = field(default_factory=list)
    info_now: PollutionSnapshot | None = None

    def to_dict(self) -> dict:
        return {
            "chartData": [point.to_dict() for point in self.chart_data],
            "infoNow": self.info_now.raw if self.info_now else None,
        }


def parse_snapshot(payload: Any) -> PollutionSnapshot | None:
    """
    Build a snapshot from a city feed payload.

    :param payload: Parsed JSON from the city feed endpoint
    :return: Snapshot, or None if the payload has no "data" object
    :rtype: PollutionSnapshot | None
    """
    if not isinstance(payload, dict) or not isinstance(payload.get("data"), dict):
        return None

    data = payload["data"]
    city = data.get("city") if isinstance(data.get("city"), dict) else {}

    latitude = longitude = None
    geo = city.get("geo")
    try:
        latitude, longitude = float(geo[0]), float(geo[1])
    except (TypeError, ValueError, IndexError):
        _LOGGER.warning("Snapshot has no usable coordinates: %r", geo)

    observed_at = None
    time_info = data.get("time") if isinstance(data.get("time"), dict) else {}
    if time_info.get("iso"):
        try:
            observed_at = datetime.fromisoformat(time_info["iso"])
        except (TypeError, ValueError):
            _LOGGER.debug("Unparseable snapshot time %r", time_info["iso"])

    return PollutionSnapshot(
        city_name=city.get("name"),
        latitude=latitude,
        longitude=longitude,
        aqi=parse_aqi(data.get("aqi")),
        observed_at=observed_at,
        raw=data,
    )


def parse_history(payload: Any) -> list[HistoryPoint]:
    """
    Build time-ordered history points from a pollution history payload.

    Entries without a timestamp or AQI are skipped.

    :param payload: Parsed JSON from the history endpoint
    :return: History points sorted by timestamp
    :rtype: list[HistoryPoint]
    """
    if not isinstance(payload, dict) or not isinstance(payload.get("list"), list):
        return []

    points = []
    for entry in payload["list"]:
        try:
            timestamp = datetime.fromtimestamp(int(entry["dt"]), tz=timezone.utc)
            aqi = parse_aqi(entry["main"]["aqi"])
        except (KeyError, TypeError, ValueError, OverflowError, OSError):
            _LOGGER.debug("Skipping malformed history entry %r", entry)
            continue

        if aqi is None:
            _LOGGER.debug("Skipping history entry at %s without AQI.", timestamp)
            continue

        components = entry.get("components")
        points.append(HistoryPoint(timestamp, aqi, components if isinstance(components, dict) else {}))

    return sorted(points, key=lambda point: point.timestamp)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class HistoryAssembler:
    """Builds the chart data for the user's location or the reference city."""

    def __init__(
        self,
        gateway: FetchGateway,
        location_context: LocationContext,
        snapshot_url: str = const.WAQI_FEED_URL.format(
            city=const.REFERENCE_CITY, token=const.WAQI_TOKEN
        ),
        snapshot_fallback: str | None = const.SNAPSHOT_FALLBACK,
        history_url: str = const.OPENWEATHER_HISTORY_URL,
        history_token: str = const.OPENWEATHER_TOKEN,
        history_fallback: str | None = const.HISTORY_FALLBACK,
        window: timedelta = const.HISTORY_WINDOW,
        clock: Callable[[], datetime] = _utc_now,
    ):
        """
        Initialize the HistoryAssembler.

        :param gateway: Gateway used for both requests
        :type gateway: FetchGateway
        :param location_context: Source of the optional user location
        :type location_context: LocationContext
        :param snapshot_url: Current reading of the reference city
        :param snapshot_fallback: Fallback for the current reading
        :param history_url: History endpoint, without query parameters
        :param history_token: API key for the history endpoint
        :param history_fallback: Fallback for the history
        :param window: Length of the history window ending now
        :type window: timedelta
        :param clock: Returns the current time as an aware datetime
        """
        self._gateway = gateway
        self._location_context = location_context
        self._snapshot_url = snapshot_url
        self._snapshot_fallback = snapshot_fallback
        self._history_url = history_url
        self._history_token = history_token
        self._history_fallback = history_fallback
        self._window = window
        self._clock = clock


    async def build_chart_data(self) -> ChartData:
        """
        Fetch the current snapshot and the readings of the last window.

        :return: History points and the current snapshot (None if unavailable)
        :rtype: ChartData
        """
        info_now = parse_snapshot(
            await self._gateway.fetch(self._snapshot_url, self._snapshot_fallback)
        )
        if info_now is None:
            _LOGGER.warning("No current snapshot available.")

        latitude, longitude = self._history_coordinates(info_now)
        end = self._clock()
        start = end - self._window

        payload = await self._gateway.fetch(
            self.history_url(latitude, longitude, start, end),
            self._history_fallback,
        )
        chart_data = parse_history(payload)

        _LOGGER.info(
            "Collected %d history points for %.4f, %.4f.",
            len(chart_data),
            latitude,
            longitude,
        )
        return ChartData(chart_data, info_now)


    def history_url(self, latitude: float, longitude: float, start: datetime, end: datetime) -> str:
        """Build the history request URL; bounds are sent as Unix seconds."""
        query = urlencode({
            "lat": latitude,
            "lon": longitude,
            "start": int(start.timestamp()),
            "end": int(end.timestamp()),
            "appid": self._history_token,
        })
        return f"{self._history_url}?{query}"


    def _history_coordinates(self, info_now: PollutionSnapshot | None) -> tuple[float, float]:
        """Pick the user location, then the snapshot's, then the reference city's."""
        location = self._location_context.location
        if location is not None:
            return location.latitude, location.longitude

        if info_now is not None and info_now.coordinates is not None:
            return info_now.coordinates

        return const.REFERENCE_COORDINATES
