"""
Base health source interface.

A source is anything that can produce a NomadHealth reading.
This keeps the exporter decoupled from where the payload actually
comes from (a live Nomad agent or the mock one).
"""

from abc import ABC, abstractmethod

from nomad_exporter.health import NomadHealth


class HealthSource(ABC):
    """Interface for all health payload sources."""

    @abstractmethod
    def fetch(self) -> NomadHealth:
        """Fetch one reading. Raises ScrapeError on failure."""
        ...

    @abstractmethod
    def name(self) -> str:
        """Human-readable name for this source."""
        ...

    def close(self):
        pass
