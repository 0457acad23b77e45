"""Ping collection: probes and the round scheduler."""

from .probe import ProbeFailure, ProbeResult, ProbeSuccess, probe
from .scheduler import PingScheduler, RoundReport

__all__ = [
    "PingScheduler",
    "ProbeFailure",
    "ProbeResult",
    "ProbeSuccess",
    "RoundReport",
    "probe",
]
