"""
Mock Nomad health generator.

Produces fake but plausible health payloads so we can develop and
test without a cluster. Traffic is mostly 200s with the occasional
404/429/500 that shows up for a few readings and then disappears,
which exercises the reset-to-zero path of the current counts.
"""

import math
import random
from typing import Dict

# Share of traffic each code gets while it is "active"
_CODE_WEIGHTS = {"200": 0.92, "404": 0.05, "429": 0.02, "500": 0.01}


class MockNomadAgent:

    def __init__(self, seed: int = 42, tick_seconds: float = 15.0):
        self._rng = random.Random(seed)
        self._tick = 0
        self._tick_seconds = tick_seconds
        self._totals: Dict[str, float] = {}
        self._total_requests = 0
        self._total_response_time = 0.0

    def payload(self) -> dict:
        """Generate one health payload, advancing the simulation clock."""
        self._tick += 1
        t = self._tick

        # Sinusoidal request rate with occasional bursts
        base_rate = 40 + 25 * math.sin(t * 0.1)
        burst = self._rng.random() * 60 if self._rng.random() > 0.9 else 0
        requests = max(1, int(base_rate + burst))

        current: Dict[str, float] = {}
        for code, weight in _CODE_WEIGHTS.items():
            # Error codes only appear on some readings
            if code != "200" and self._rng.random() > 0.3:
                continue
            count = max(1, int(requests * weight * self._rng.uniform(0.6, 1.4)))
            current[code] = float(count)
            self._totals[code] = self._totals.get(code, 0.0) + count

        # Latency creeps up under bursts
        avg_response = max(0.001, 0.012 + burst * 0.0004 + self._rng.gauss(0, 0.002))
        handled = int(sum(current.values()))
        self._total_requests += handled
        self._total_response_time += handled * avg_response

        return {
            "uptime_sec": t * self._tick_seconds,
            "status_code_count": current,
            "total_status_code_count": dict(self._totals),
            "total_response_time_sec": round(self._total_response_time, 6),
            "average_response_time_sec": round(self._total_response_time / self._total_requests, 6),
        }
