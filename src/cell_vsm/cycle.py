"""Per-station cycle time and throughput calculations.

All functions are pure and never raise: missing or invalid station fields
fall back to the values in StationDefaults.

- per-unit CT   = cycle time + setup time / batch size
- effective CT  = per-unit CT / (uptime% / 100)
- station UPH   = 3600 / effective CT
"""

import math

from cell_vsm.models import (
    DEFAULT_STATION_DEFAULTS,
    SECONDS_PER_HOUR,
    Station,
    StationDefaults,
)


def _positive(value, fallback: float) -> float:
    if value is None or not math.isfinite(value) or value <= 0:
        return fallback
    return float(value)


def per_unit_cycle_time(
    station: Station, defaults: StationDefaults = DEFAULT_STATION_DEFAULTS
) -> float:
    """Seconds per unit including setup amortized over the batch."""
    cycle_time = _positive(station.cycle_time, defaults.default_cycle_time_sec)
    setup_time = _positive(station.setup_time, 0.0)
    batch_size = _positive(station.batch_size, 1.0)
    return cycle_time + setup_time / batch_size


def uptime_fraction(
    station: Station, defaults: StationDefaults = DEFAULT_STATION_DEFAULTS
) -> float:
    """Uptime as a fraction, clamped so it is never zero."""
    uptime = station.uptime_percent
    if uptime is None or not math.isfinite(uptime):
        uptime = 100.0
    clamped = min(
        max(uptime, defaults.min_uptime_percent), defaults.max_uptime_percent
    )
    return clamped / 100.0


def effective_cycle_time(
    station: Station, defaults: StationDefaults = DEFAULT_STATION_DEFAULTS
) -> float:
    """Per-unit cycle time stretched by uptime losses."""
    return per_unit_cycle_time(station, defaults) / uptime_fraction(station, defaults)


def station_throughput_uph(
    station: Station, defaults: StationDefaults = DEFAULT_STATION_DEFAULTS
) -> float:
    """Units per hour a single machine can produce."""
    effective_ct = effective_cycle_time(station, defaults)
    if effective_ct <= 0:
        return 0.0
    return SECONDS_PER_HOUR / effective_ct
