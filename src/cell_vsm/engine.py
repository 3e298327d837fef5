"""System-wide value stream metrics.

Combines process steps (and an optional raw material supply rate) into
throughput, bottleneck, lead time, waiting time, WIP and efficiency.
The engine is a single pass over the stations, never raises for
degenerate input, and never returns inf or nan.
"""

import math
from typing import Iterable, List, Optional

from cell_vsm.models import (
    DEFAULT_STATION_DEFAULTS,
    SECONDS_PER_HOUR,
    ProcessStep,
    Station,
    StationDefaults,
    SystemMetrics,
    VsmConfig,
)
from cell_vsm.steps import aggregate_steps


def _finite(value: float) -> float:
    """Map inf/nan to the 0.0 sentinel."""
    return value if math.isfinite(value) else 0.0


def _bottleneck_index(steps: List[ProcessStep]) -> int:
    """Index of the step with the lowest combined rate; the first one wins ties."""
    best = 0
    for i, step in enumerate(steps):
        if step.combined_rate_uph < steps[best].combined_rate_uph:
            best = i
    return best


def calculate_system_metrics(
    steps: List[ProcessStep], config: Optional[VsmConfig] = None
) -> SystemMetrics:
    """Derive system metrics from already aggregated steps.

    Args:
        steps: ProcessSteps sorted by step number
        config: Optional raw material supply constraint

    Returns:
        SystemMetrics with per-step utilization and waiting time filled in
    """
    raw_uph = config.raw_material_uph if config else None
    if raw_uph is not None and not math.isfinite(raw_uph):
        raw_uph = None
    if not steps:
        return SystemMetrics(raw_material_uph=raw_uph)

    # 1-2. Constraint: slowest step, unless raw material is scarcer
    process_capacity = min(step.combined_rate_uph for step in steps)
    is_raw_bottleneck = (
        raw_uph is not None and 0 < raw_uph < process_capacity
    )
    if is_raw_bottleneck:
        throughput = float(raw_uph)
        bottleneck_idx = None
    else:
        throughput = process_capacity
        bottleneck_idx = _bottleneck_index(steps)

    # 3. Pace at which the system releases units
    system_ct = SECONDS_PER_HOUR / throughput if throughput > 0 else 0.0

    # 4. Utilization and waiting relative to the constraint
    resolved: List[ProcessStep] = []
    for step in steps:
        rate = step.combined_rate_uph
        util = throughput / rate * 100.0 if rate > 0 else 0.0
        waiting = max(0.0, system_ct - step.effective_ct_sec)
        resolved.append(
            step.model_copy(
                update={
                    "effective_ct_sec": _finite(step.effective_ct_sec),
                    "avg_util_percent": util,
                    "waiting_time_sec": waiting,
                }
            )
        )

    # 5-10. Totals
    value_add = sum(step.avg_station_ct for step in resolved)
    total_waiting = sum(step.waiting_time_sec for step in resolved)
    lead_time = value_add + total_waiting
    efficiency = value_add / lead_time * 100.0 if lead_time > 0 else 0.0
    avg_util = sum(step.avg_util_percent for step in resolved) / len(resolved)
    total_wip = sum(step.wip_before for step in resolved)

    bottleneck_step = None
    if bottleneck_idx is not None:
        bottleneck_step = resolved[bottleneck_idx]

    return SystemMetrics(
        steps=tuple(resolved),
        system_throughput_uph=throughput,
        process_capacity_uph=process_capacity,
        system_ct_sec=system_ct,
        total_lead_time_sec=lead_time,
        total_wip=total_wip,
        process_efficiency_percent=efficiency,
        value_add_time_sec=value_add,
        total_waiting_time_sec=total_waiting,
        avg_utilization_percent=avg_util,
        bottleneck_step=bottleneck_step,
        is_raw_material_bottleneck=is_raw_bottleneck,
        raw_material_uph=raw_uph,
    )


def calculate_detailed_metrics(
    stations: Iterable[Station],
    config: Optional[VsmConfig] = None,
    defaults: StationDefaults = DEFAULT_STATION_DEFAULTS,
) -> SystemMetrics:
    """Compute the full metric set for a station collection.

    Args:
        stations: Station records (order does not matter)
        config: Optional raw material supply constraint
        defaults: Policy values for missing station fields

    Returns:
        A fresh SystemMetrics value; the input is left untouched
    """
    return calculate_system_metrics(aggregate_steps(stations, defaults), config)


def simulate_vsm(
    stations: Iterable[Station],
    config: Optional[VsmConfig] = None,
    defaults: StationDefaults = DEFAULT_STATION_DEFAULTS,
) -> SystemMetrics:
    """Recompute metrics after an edit (same result as calculate_detailed_metrics)."""
    return calculate_detailed_metrics(stations, config, defaults)
