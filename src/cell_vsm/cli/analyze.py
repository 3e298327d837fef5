"""Analyze command: compute and print metrics for a value stream map."""

from typing import Optional

import pandas as pd

from cell_vsm.engine import calculate_detailed_metrics
from cell_vsm.export import format_time, metrics_to_frame
from cell_vsm.loader import ConfigLoader
from cell_vsm.models import SystemMetrics, VsmConfig


def analyze(
    map_name: str,
    config_dir: str = "config",
    raw_material_uph: Optional[float] = None,
) -> SystemMetrics:
    """Load a map config, compute its metrics, and print a summary.

    Args:
        map_name: Name of the map config (without .yaml extension)
        config_dir: Path to config directory
        raw_material_uph: Overrides the map's raw material rate when given

    Returns:
        The computed SystemMetrics
    """
    loader = ConfigLoader(config_dir)
    document = loader.load_map(map_name)
    raw_uph = raw_material_uph if raw_material_uph is not None else document.raw_material_uph

    metrics = calculate_detailed_metrics(
        document.stations,
        VsmConfig(raw_material_uph=raw_uph),
        loader.defaults.station_defaults,
    )

    print(f"Value stream map: {document.name}")
    print(f"  Operations: {len(metrics.steps)}")
    print(f"  Machines:   {len(document.stations)}")

    print("\n--- SYSTEM SUMMARY ---")
    print(f"System Throughput: {metrics.system_throughput_uph:,.1f} UPH")
    print(f"Process Capacity:  {metrics.process_capacity_uph:,.1f} UPH")
    print(f"Total Lead Time:   {format_time(metrics.total_lead_time_sec)}")
    print(f"Value-Add Time:    {format_time(metrics.value_add_time_sec)}")
    print(f"Waiting Time:      {format_time(metrics.total_waiting_time_sec)}")
    print(f"Cell Balance:      {metrics.cell_balance_percent:.1f}%")
    print(f"Avg Utilization:   {metrics.avg_utilization_percent:.1f}%")
    print(f"Total WIP:         {metrics.total_wip:g} units")

    if metrics.is_raw_material_bottleneck:
        print(f"Constraint:        raw material supply ({raw_uph:,.0f} UPH)")
    elif metrics.bottleneck_step is not None:
        print(f"Constraint:        Op {metrics.bottleneck_step.step}")

    if metrics.steps:
        print("\n--- OPERATIONS ---")
        df = metrics_to_frame(metrics, document.operation_names)
        with pd.option_context("display.width", 160, "display.max_columns", None):
            print(df.round(1).to_string(index=False))

    return metrics
