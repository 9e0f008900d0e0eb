"""
Decoded form of the Nomad health payload.

Only the fields the exporter republishes are kept. Every field is
optional upstream; anything missing (or null) decodes to zero.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Dict


def _number(payload: Dict[str, Any], key: str) -> float:
    value = payload.get(key)
    if value is None:
        return 0.0
    # bool is an int subclass, but true/false is not a number in JSON
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"{key}: expected a number, got {type(value).__name__}")
    try:
        number = float(value)
    except OverflowError as e:
        raise ValueError(f"{key}: number out of range") from e
    if not math.isfinite(number):
        raise ValueError(f"{key}: number out of range")
    return number


def _counts(payload: Dict[str, Any], key: str) -> Dict[str, float]:
    value = payload.get(key)
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ValueError(f"{key}: expected an object, got {type(value).__name__}")
    return {code: _number(value, code) for code in value}


@dataclass
class NomadHealth:
    """One reading of the upstream health endpoint."""

    uptime_sec: float = 0.0

    # Keyed by status code string, e.g. "200"
    status_code_count: Dict[str, float] = field(default_factory=dict)
    total_status_code_count: Dict[str, float] = field(default_factory=dict)

    # Seconds
    total_response_time_sec: float = 0.0
    average_response_time_sec: float = 0.0

    @classmethod
    def from_payload(cls, payload: Any) -> "NomadHealth":
        """Build a snapshot from decoded JSON. Raises ValueError on a bad shape."""
        if payload is None:
            return cls()
        if not isinstance(payload, dict):
            raise ValueError(f"expected a JSON object, got {type(payload).__name__}")

        return cls(
            uptime_sec=_number(payload, "uptime_sec"),
            status_code_count=_counts(payload, "status_code_count"),
            total_status_code_count=_counts(payload, "total_status_code_count"),
            total_response_time_sec=_number(payload, "total_response_time_sec"),
            average_response_time_sec=_number(payload, "average_response_time_sec"),
        )
