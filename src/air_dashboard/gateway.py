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
HTTP gateway with bounded timeouts and fallback sources
"""

import asyncio
import json
import logging
from importlib import resources
from pathlib import Path
from typing import Any

import aiohttp

from air_dashboard import const
from air_dashboard.exceptions import (
    FetchError,
    FetchTimeoutError,
    HttpStatusError,
    PayloadParseError,
    ProviderStatusError,
)

_LOGGER = logging.getLogger(__name__)

class FetchGateway:
    """
    Retrieves JSON documents from remote providers.

    A primary request that times out, fails, answers with a bad status
    or returns an unusable body is replaced by the fallback source, if any.
    The gateway never raises for network or payload errors; a call that
    yields nothing returns None.
    """

    def __init__(
        self,
        session: aiohttp.ClientSession | None = None,
        request_timeout: float = const.REQUEST_TIMEOUT,
    ):
        """
        Initialize the FetchGateway.

        :param session: Shared aiohttp session; one is created on demand if omitted
        :type session: aiohttp.ClientSession, optional
        :param request_timeout: Timeout of the primary request in seconds
        :type request_timeout: float
        """
        self._session = session
        self._owns_session = session is None
        self._request_timeout = request_timeout
        self._last_fetch_status = "Not yet run"


    async def __aenter__(self) -> "FetchGateway":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()


    @property
    def last_fetch_status(self) -> str:
        """Get status message from the last fetch."""
        return self._last_fetch_status

    @property
    def session(self) -> aiohttp.ClientSession:
        """Get the HTTP session, creating it lazily."""
        if self._session is None:
            # Primary requests are bounded by fetch(), fallbacks run unbounded
            self._session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(),
                headers={
                    "User-Agent": const.USER_AGENT,
                    "Accept": "application/json",
                }
            )
        return self._session


    async def close(self) -> None:
        """Close the HTTP session if it was created by this gateway."""
        if self._owns_session and self._session is not None:
            await self._session.close()
            self._session = None


    async def fetch(self, url: str, fallback: str | None = None) -> Any | None:
        """
        Fetch a JSON document, using the fallback source when the primary fails.

        :param url: Primary URL, requested with the gateway timeout
        :type url: str
        :param fallback: Fallback URL, bundled resource name or file path
        :type fallback: str, optional
        :return: Parsed JSON document, or None if no source produced data
        :rtype: Any | None
        """
        try:
            payload = await asyncio.wait_for(
                self._get_json(url),
                timeout=self._request_timeout
            )
            self._last_fetch_status = f"Success. Fetched {url}"
            return payload
        except asyncio.TimeoutError:
            error = FetchTimeoutError(
                f"Request to {url} exceeded {self._request_timeout} s and was cancelled"
            )
        except FetchError as exc:
            error = exc

        if fallback is None:
            self._last_fetch_status = f"Fetch failed: {error}"
            _LOGGER.error("Fetch failed with no fallback available: %s", error)
            return None

        _LOGGER.warning("Primary fetch failed: %s. Using fallback %s.", error, fallback)

        try:
            payload = await self._load_fallback(fallback)
        except FetchError as exc:
            self._last_fetch_status = f"Fetch and fallback failed: {error}; {exc}"
            _LOGGER.error("Fallback %s failed as well: %s", fallback, exc)
            return None

        self._last_fetch_status = f"Primary failed ({error}). Loaded fallback {fallback}"
        _LOGGER.info("Loaded fallback data from %s.", fallback)
        return payload


    async def _get_json(self, url: str, timeout: aiohttp.ClientTimeout | None = None) -> Any:
        """
        Perform a GET request and parse its JSON body.

        :param url: URL to download
        :type url: str
        :param timeout: Overrides the session timeout for this request
        :type timeout: aiohttp.ClientTimeout, optional
        :return: Parsed JSON document
        :rtype: Any
        :raises HttpStatusError: On non-2xx status
        :raises ProviderStatusError: If the body carries an error status
        :raises PayloadParseError: If the body is not usable JSON
        :raises FetchError: On transport errors
        """
        _LOGGER.debug("Requesting %s", url)

        try:
            request_options = {} if timeout is None else {"timeout": timeout}
            async with self.session.get(url, **request_options) as response:
                if not 200 <= response.status < 300:
                    raise HttpStatusError(response.status, url)
                try:
                    payload = await response.json(content_type=None)
                except ValueError as exc:
                    raise PayloadParseError(f"Invalid JSON from {url}: {exc}") from exc
        except aiohttp.ClientError as exc:
            raise FetchError(f"Request to {url} failed: {exc}") from exc

        return self._validate_payload(payload, url)


    async def _load_fallback(self, fallback: str) -> Any:
        """
        Load the fallback document without a timeout.

        :param fallback: URL, bundled resource name or file path
        :type fallback: str
        :return: Parsed JSON document
        :rtype: Any
        :raises FetchError: If the fallback cannot be loaded or parsed
        """
        if fallback.startswith(("http://", "https://")):
            return await self._get_json(fallback, timeout=aiohttp.ClientTimeout())

        try:
            text = self._read_local(fallback)
            payload = json.loads(text)
        except OSError as exc:
            raise FetchError(f"Cannot read fallback {fallback}: {exc}") from exc
        except ValueError as exc:
            # JSONDecodeError and UnicodeDecodeError
            raise PayloadParseError(f"Invalid JSON in fallback {fallback}: {exc}") from exc

        return self._validate_payload(payload, fallback)


    @staticmethod
    def _read_local(name: str) -> str:
        """Read a bundled data resource, or a file path when no such resource exists."""
        resource = resources.files("air_dashboard").joinpath("data").joinpath(name)
        if resource.is_file():
            return resource.read_text(encoding="utf-8")

        return Path(name).read_text(encoding="utf-8")


    @staticmethod
    def _validate_payload(payload: Any, source: str) -> Any:
        """
        Reject payloads that parse but carry no data.

        :raises PayloadParseError: If the document is JSON null
        :raises ProviderStatusError: If a "status" key is present and not "ok"
        """
        if payload is None:
            raise PayloadParseError(f"Empty JSON document from {source}")

        if isinstance(payload, dict) and const.PROVIDER_STATUS_KEY in payload:
            status = payload[const.PROVIDER_STATUS_KEY]
            if status != const.PROVIDER_STATUS_OK:
                raise ProviderStatusError(status, source)

        return payload
