"""
Source that reads from the mock Nomad agent.
Used for local development without a cluster.
"""

from nomad_exporter.collector.base import HealthSource
from nomad_exporter.health import NomadHealth
from nomad_exporter.mock.generator import MockNomadAgent


class MockHealthSource(HealthSource):
    """Wraps the mock generator as a standard source."""

    def __init__(self, seed: int = 42):
        self._agent = MockNomadAgent(seed=seed)

    def fetch(self) -> NomadHealth:
        return NomadHealth.from_payload(self._agent.payload())

    def name(self) -> str:
        return "Mock Nomad agent"
