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
Constants for endpoints, tokens, timeouts and limits
"""

from datetime import timedelta

USER_AGENT = "air-dashboard-data/1.0 (python)"

# World Air Quality Index project
WAQI_TOKEN = "demo"
WAQI_STATIONS_URL = "https://api.waqi.info/map/bounds/?latlng=-90,-180,90,180&token={token}"
WAQI_FEED_URL = "https://api.waqi.info/feed/{city}/?token={token}"

# OpenWeather air pollution history
OPENWEATHER_TOKEN = "3368d25e656a521f14b4de50a62fbd93"
OPENWEATHER_HISTORY_URL = "https://api.openweathermap.org/data/2.5/air_pollution/history"

# Mapbox reverse geocoding
MAPBOX_TOKEN = "pk.air-dashboard-placeholder"

IP_GEOLOCATION_URL = "https://ipwho.is/"

REFERENCE_CITY = "moscow"
REFERENCE_COORDINATES = (55.7558, 37.6176)

# Seconds
REQUEST_TIMEOUT = 3
GEOLOCATION_TIMEOUT = 3
GEOCODE_TIMEOUT = 5
GEOCODE_MIN_DELAY = 0.2

MAX_RANKED_CITIES = 5

# Position of the city-level place in the geocoder's feature hierarchy
# (address, neighborhood/postcode, place, region, country)
CITY_FEATURE_INDEX = 2

HISTORY_WINDOW = timedelta(hours=72)

# Bundled payloads in air_dashboard/data, same shape as the remote responses
STATIONS_FALLBACK = "stations.json"
SNAPSHOT_FALLBACK = "snapshot.json"
HISTORY_FALLBACK = "history.json"

PROVIDER_STATUS_KEY = "status"
PROVIDER_STATUS_OK = "ok"
