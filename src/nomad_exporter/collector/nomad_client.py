"""
Source for a live Nomad agent. One blocking GET per fetch against
the configured address, decoded into NomadHealth. Transport failures,
non-2xx responses and malformed bodies all surface as ScrapeError.
"""

from __future__ import annotations

from typing import Optional

import httpx

from nomad_exporter.collector.base import HealthSource
from nomad_exporter.exceptions import ScrapeError, ScrapeErrorKind
from nomad_exporter.health import NomadHealth

DEFAULT_ADDRESS = "http://127.0.0.1:4646"


class NomadHealthSource(HealthSource):

    def __init__(
        self,
        address: str = DEFAULT_ADDRESS,
        region: str = "",
        timeout_seconds: float = 5.0,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self._address = address or DEFAULT_ADDRESS
        self._region = region
        self._client = httpx.Client(
            timeout=timeout_seconds,
            follow_redirects=True,
            transport=transport,
        )

    @property
    def address(self) -> str:
        return self._address

    @property
    def region(self) -> str:
        return self._region

    def fetch(self) -> NomadHealth:
        params = {"region": self._region} if self._region else None
        try:
            response = self._client.get(self._address, params=params)
        except (httpx.RequestError, httpx.InvalidURL) as e:
            raise ScrapeError(ScrapeErrorKind.TRANSPORT, str(e)) from e

        if not response.is_success:
            raise ScrapeError(
                ScrapeErrorKind.BAD_STATUS,
                f"status {response.status_code}",
                status_code=response.status_code,
            )

        try:
            return NomadHealth.from_payload(response.json())
        except (ValueError, RecursionError) as e:
            # Over-deep nesting raises RecursionError rather than a ValueError
            raise ScrapeError(ScrapeErrorKind.DECODE, f"json decode {e}") from e

    def name(self) -> str:
        if self._region:
            return f"Nomad ({self._address}, region {self._region})"
        return f"Nomad ({self._address})"

    def close(self):
        self._client.close()
