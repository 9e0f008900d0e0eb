"""Errors raised while scraping the Nomad health endpoint."""

from __future__ import annotations

import enum
from typing import Optional


class ScrapeErrorKind(enum.Enum):
    TRANSPORT = "transport"
    BAD_STATUS = "bad_status"
    DECODE = "decode"


class ScrapeError(Exception):
    """A single scrape failed. Never fatal; the exporter reports nomad_up 0."""

    def __init__(self, kind: ScrapeErrorKind, message: str, status_code: Optional[int] = None):
        super().__init__(f"Can't scrape Nomad: {message}")
        self.kind = kind
        self.status_code = status_code
