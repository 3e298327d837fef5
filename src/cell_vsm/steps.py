"""Grouping of stations into process steps.

Stations sharing a process step are machines running in parallel on the
same operation, so their throughputs add: two 60 UPH machines give a
120 UPH step.
"""

import math
from typing import Dict, Iterable, List

from cell_vsm.cycle import per_unit_cycle_time, station_throughput_uph
from cell_vsm.models import (
    DEFAULT_STATION_DEFAULTS,
    SECONDS_PER_HOUR,
    ProcessStep,
    Station,
    StationDefaults,
)


def _wip(value) -> float:
    """Queued units; invalid or negative counts read as 0."""
    if value is None or not math.isfinite(value):
        return 0.0
    return max(0.0, float(value))


class _StepAccumulator:
    """Running totals for one step while scanning the station list."""

    __slots__ = ("stations", "ct_total", "rate_total", "wip_total")

    def __init__(self) -> None:
        self.stations: List[Station] = []
        self.ct_total = 0.0
        self.rate_total = 0.0
        self.wip_total = 0.0

    def add(self, station: Station, defaults: StationDefaults) -> None:
        self.stations.append(station)
        self.ct_total += per_unit_cycle_time(station, defaults)
        self.rate_total += station_throughput_uph(station, defaults)
        self.wip_total += _wip(station.wip_before)


def aggregate_steps(
    stations: Iterable[Station],
    defaults: StationDefaults = DEFAULT_STATION_DEFAULTS,
) -> List[ProcessStep]:
    """Build one ProcessStep per distinct step number, sorted ascending.

    Utilization and waiting time are left at zero; they depend on the system
    throughput and are filled in by the metrics engine.

    Args:
        stations: Station records in any order
        defaults: Policy values for missing station fields

    Returns:
        ProcessSteps sorted by step number
    """
    groups: Dict[int, _StepAccumulator] = {}
    for station in stations:
        acc = groups.get(station.step)
        if acc is None:
            acc = groups[station.step] = _StepAccumulator()
        acc.add(station, defaults)

    steps = []
    for step_number in sorted(groups):
        acc = groups[step_number]
        machines = len(acc.stations)
        rate = acc.rate_total
        steps.append(
            ProcessStep(
                step=step_number,
                stations=tuple(acc.stations),
                machines=machines,
                avg_station_ct=acc.ct_total / machines,
                combined_rate_uph=rate,
                effective_ct_sec=SECONDS_PER_HOUR / rate if rate > 0 else math.inf,
                per_machine_avg_uph=rate / machines,
                wip_before=acc.wip_total,
            )
        )
    return steps
