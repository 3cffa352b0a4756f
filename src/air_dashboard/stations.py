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
Parsing, validation and ranking of raw station records
"""

import logging
from dataclasses import dataclass
from typing import Any

_LOGGER = logging.getLogger(__name__)

@dataclass(frozen=True)
class Station:
    """A sensor location reporting an air quality index."""

    station_id: str
    latitude: float
    longitude: float
    aqi: int


def parse_aqi(value: Any) -> int | None:
    """
    Convert a raw AQI reading to an integer.

    Providers report stations without a current reading as "-" or leave
    the value out entirely.

    :param value: Raw AQI value (number or numeric string)
    :return: Non-negative integer AQI, or None if the value is unusable
    :rtype: int | None
    """
    if value is None or isinstance(value, bool):
        return None

    try:
        aqi = int(float(value))
    except (ValueError, TypeError, OverflowError):
        return None

    return aqi if aqi >= 0 else None


def _station_records(payload: Any) -> list[tuple[str, Any]]:
    """Get (station_id, record) pairs from a list or mapping under the "data" key."""
    if not isinstance(payload, dict):
        return []

    data = payload.get("data")
    if isinstance(data, dict):
        return [(str(key), record) for key, record in data.items()]
    if isinstance(data, list):
        return [
            (str(record.get("uid", index)) if isinstance(record, dict) else str(index), record)
            for index, record in enumerate(data)
        ]

    return []


def parse_stations(payload: Any) -> list[Station]:
    """
    Build stations from an index provider payload, dropping invalid records.

    :param payload: Parsed JSON from the station index endpoint
    :return: Stations with a valid AQI and coordinates, in payload order
    :rtype: list[Station]
    """
    stations = []
    skipped = 0

    for station_id, record in _station_records(payload):
        if not isinstance(record, dict):
            skipped += 1
            continue

        aqi = parse_aqi(record.get("aqi"))
        if aqi is None:
            _LOGGER.debug("Skipping station %s with invalid AQI %r.", station_id, record.get("aqi"))
            skipped += 1
            continue

        try:
            latitude = float(record["lat"])
            longitude = float(record["lon"])
        except (KeyError, TypeError, ValueError):
            _LOGGER.debug("Skipping station %s due to invalid coordinates.", station_id)
            skipped += 1
            continue

        stations.append(Station(station_id, latitude, longitude, aqi))

    _LOGGER.info("Parsed %d valid stations (%d skipped).", len(stations), skipped)
    return stations


def rank_stations(stations: list[Station]) -> list[Station]:
    """Sort stations by ascending AQI, keeping payload order for ties."""
    return sorted(stations, key=lambda station: station.aqi)
