"""Human-readable reports for value stream maps."""

from datetime import datetime
from typing import Dict, List, Mapping, Optional, Sequence

import pandas as pd

from cell_vsm.cycle import effective_cycle_time, station_throughput_uph
from cell_vsm.engine import calculate_detailed_metrics
from cell_vsm.models import (
    DEFAULT_STATION_DEFAULTS,
    SECONDS_PER_HOUR,
    Station,
    StationDefaults,
    SystemMetrics,
    VsmConfig,
)
from cell_vsm.stations import operation_name

# Insight thresholds
LOW_CELL_BALANCE_PERCENT = 70.0
UNDERUTILIZED_PERCENT = 50.0
HIGH_WIP_PER_OPERATION = 10

STEP_COLUMNS = [
    "step",
    "operation",
    "machines",
    "combined_rate_uph",
    "per_machine_avg_uph",
    "avg_station_ct",
    "effective_ct_sec",
    "avg_util_percent",
    "waiting_time_sec",
    "wip_before",
    "is_bottleneck",
]


def format_time(seconds: float) -> str:
    """Format a duration as seconds, minutes, or hours and minutes."""
    if seconds < 60:
        return f"{seconds:.1f}s"
    if seconds < 3600:
        return f"{seconds / 60:.1f} min"
    hours = int(seconds // 3600)
    mins = round((seconds % 3600) / 60)
    return f"{hours}h {mins}m"


def _uph(value: float) -> str:
    return f"{value:,.0f}"


def _number(value: float) -> str:
    """Whole numbers without a trailing .0."""
    return f"{value:g}"


def metrics_to_frame(
    metrics: SystemMetrics, operation_names: Optional[Mapping[int, str]] = None
) -> pd.DataFrame:
    """Per-step metrics as a DataFrame (one row per process step)."""
    bottleneck = metrics.bottleneck_step.step if metrics.bottleneck_step else None
    rows = [
        {
            "step": step.step,
            "operation": operation_name(step.step, step.stations, operation_names),
            "machines": step.machines,
            "combined_rate_uph": step.combined_rate_uph,
            "per_machine_avg_uph": step.per_machine_avg_uph,
            "avg_station_ct": step.avg_station_ct,
            "effective_ct_sec": step.effective_ct_sec,
            "avg_util_percent": step.avg_util_percent,
            "waiting_time_sec": step.waiting_time_sec,
            "wip_before": step.wip_before,
            "is_bottleneck": step.step == bottleneck,
        }
        for step in metrics.steps
    ]
    if not rows:
        return pd.DataFrame(columns=STEP_COLUMNS)
    return pd.DataFrame(rows, columns=STEP_COLUMNS)


def export_vsm_markdown(
    name: str,
    description: str,
    stations: Sequence[Station],
    raw_material_uph: Optional[float] = None,
    operation_names: Optional[Mapping[int, str]] = None,
    generated_at: Optional[datetime] = None,
    defaults: StationDefaults = DEFAULT_STATION_DEFAULTS,
) -> str:
    """Create a Markdown report with metrics, constraint analysis and insights.

    Args:
        name: Map name used in the title
        description: Optional description quoted under the title
        stations: Station records of the map
        raw_material_uph: Optional raw material supply rate
        operation_names: Optional display names keyed by step number
        generated_at: Timestamp printed in the header (default: now)
        defaults: Policy values for missing station fields

    Returns:
        Markdown document as a single string
    """
    metrics = calculate_detailed_metrics(
        stations, VsmConfig(raw_material_uph=raw_material_uph), defaults
    )
    op_names: Dict[int, str] = dict(operation_names or {})
    generated_at = generated_at or datetime.now()
    bottleneck = metrics.bottleneck_step
    lines: List[str] = []

    # Header
    lines.append(f"# Value Stream Map: {name}")
    lines.append("")
    if description:
        lines.append(f"> {description}")
        lines.append("")
    lines.append(f"*Generated: {generated_at:%Y-%m-%d %H:%M:%S}*")
    lines.append("")

    # Executive summary
    lines.append("## 📊 Executive Summary")
    lines.append("")
    lines.append("| Metric | Value |")
    lines.append("|--------|-------|")
    lines.append(f"| **System Throughput** | {_uph(metrics.system_throughput_uph)} UPH |")
    lines.append(f"| **Total Lead Time** | {format_time(metrics.total_lead_time_sec)} |")
    lines.append(f"| **Value-Add Time** | {format_time(metrics.value_add_time_sec)} |")
    lines.append(f"| **Total Waiting Time** | {format_time(metrics.total_waiting_time_sec)} |")
    lines.append(f"| **Cell Balance** | {metrics.cell_balance_percent:.1f}% |")
    lines.append(f"| **Avg Utilization** | {metrics.avg_utilization_percent:.1f}% |")
    lines.append(f"| **Total WIP** | {_number(metrics.total_wip)} units |")
    lines.append(f"| **Operations** | {len(metrics.steps)} |")
    lines.append(f"| **Total Machines** | {len(stations)} |")
    lines.append("")

    # Constraint analysis
    lines.append("## 🎯 Constraint Analysis")
    lines.append("")
    if metrics.is_raw_material_bottleneck:
        lines.append("**⚠️ Raw Material Supply is the System Constraint**")
        lines.append("")
        lines.append(
            f"The incoming raw material rate ({_uph(metrics.raw_material_uph or 0)} UPH) "
            "is limiting the system."
        )
        lines.append("All operations have capacity to process more, but are starved for material.")
        lines.append("")
        lines.append("**Recommendation:** Increase raw material supply to unlock additional capacity.")
    elif bottleneck is not None:
        op_name = operation_name(
            bottleneck.step, bottleneck.stations, op_names, "Operation {step}"
        )
        lines.append(f"**🔴 Bottleneck: Op {bottleneck.step} - {op_name}**")
        lines.append("")
        lines.append(
            f"This operation limits the entire system to "
            f"**{_uph(bottleneck.combined_rate_uph)} UPH**."
        )
        lines.append("")
        lines.append("| Property | Value |")
        lines.append("|----------|-------|")
        lines.append(f"| Combined Rate | {_uph(bottleneck.combined_rate_uph)} UPH |")
        lines.append(f"| Machines | {bottleneck.machines} |")
        lines.append(f"| Avg Cycle Time | {bottleneck.avg_station_ct:.1f}s |")
        lines.append(f"| Utilization | {bottleneck.avg_util_percent:.1f}% |")
        lines.append("")
        lines.append("**Improvement Options:**")
        lines.append("1. Add parallel machines at this operation")
        lines.append("2. Reduce cycle time (process improvement, automation)")
        lines.append("3. Increase uptime (reduce changeover, improve maintenance)")
        lines.append("4. Reduce setup time or increase batch size (pcs/setup)")
    lines.append("")

    # Process flow
    lines.append("## 🔄 Process Flow")
    lines.append("")
    lines.append("```")
    boxes = []
    for step in metrics.steps:
        op_name = operation_name(step.step, step.stations, op_names, "Op{step}")
        short = op_name[:12] + "…" if len(op_name) > 12 else op_name
        boxes.append(f"[{short}]")
    lines.append(f"Incoming → {' → '.join(boxes)} → Output")
    lines.append("```")
    lines.append("")

    # Operations detail
    lines.append("## ⚙️ Operations Detail")
    lines.append("")
    for step in metrics.steps:
        op_name = operation_name(step.step, step.stations, op_names, "Operation {step}")
        marker = " 🔴 BOTTLENECK" if bottleneck and bottleneck.step == step.step else ""
        lines.append(f"### Op {step.step}: {op_name}{marker}")
        lines.append("")
        lines.append("| Metric | Value |")
        lines.append("|--------|-------|")
        lines.append(f"| Combined Rate | {_uph(step.combined_rate_uph)} UPH |")
        lines.append(f"| Machines | {step.machines} |")
        lines.append(f"| Avg Cycle Time | {step.avg_station_ct:.1f}s |")
        lines.append(f"| Effective CT | {step.effective_ct_sec:.1f}s |")
        lines.append(f"| Utilization | {step.avg_util_percent:.1f}% |")
        lines.append(f"| WIP Before | {_number(step.wip_before)} units |")
        if step.waiting_time_sec > 0:
            lines.append(f"| Waiting Time | {step.waiting_time_sec:.1f}s |")
        lines.append("")

        lines.append("**Machines:**")
        lines.append("")
        lines.append("| Machine | ID | CT | Pcs/Setup | Uptime | Setup | Eff CT | UPH |")
        lines.append("|---------|-----|-----|-----------|--------|-------|--------|-----|")
        for station in step.stations:
            ct = station.cycle_time or defaults.default_cycle_time_sec
            batch = station.batch_size or 1
            uptime = 100 if station.uptime_percent is None else station.uptime_percent
            setup = station.setup_time or 0
            lines.append(
                f"| {station.name} | {station.machine_id_display or '-'} "
                f"| {_number(ct)}s | {_number(batch)} | {_number(uptime)}% "
                f"| {_number(setup)}s | {effective_cycle_time(station, defaults):.1f}s "
                f"| {station_throughput_uph(station, defaults):.0f} |"
            )
        lines.append("")

    # Insights
    lines.append("## 💡 Insights & Recommendations")
    lines.append("")

    if metrics.cell_balance_percent < LOW_CELL_BALANCE_PERCENT:
        lines.append(f"### Low Cell Balance ({metrics.cell_balance_percent:.1f}%)")
        lines.append("")
        lines.append("Operations are significantly imbalanced. Consider:")
        lines.append("- Rebalancing work content between operations")
        lines.append("- Adding machines at slower operations")
        lines.append("- Combining operations where feasible")
        lines.append("")

    underutilized = [
        s
        for s in metrics.steps
        if s.avg_util_percent < UNDERUTILIZED_PERCENT
        and not (bottleneck and bottleneck.step == s.step)
    ]
    if underutilized:
        lines.append("### Underutilized Operations")
        lines.append("")
        lines.append("These operations have significant excess capacity:")
        lines.append("")
        for s in underutilized:
            op_name = operation_name(s.step, s.stations, op_names)
            spare = s.combined_rate_uph - metrics.system_throughput_uph
            lines.append(
                f"- **Op {s.step}: {op_name}** - {s.avg_util_percent:.0f}% utilization "
                f"({spare:.0f} UPH spare capacity)"
            )
        lines.append("")
        lines.append(
            "*Note: Do not invest in improving these operations until the "
            "bottleneck is addressed.*"
        )
        lines.append("")

    if metrics.total_wip > len(metrics.steps) * HIGH_WIP_PER_OPERATION:
        lines.append("### High WIP Inventory")
        lines.append("")
        lines.append(
            f"Total WIP of {_number(metrics.total_wip)} units indicates potential flow issues."
        )
        lines.append("")
        lines.append("Per Little's Law: **Lead Time = WIP / Throughput**")
        lines.append("")
        if metrics.system_throughput_uph > 0:
            queue_lead_time = (
                metrics.total_wip / metrics.system_throughput_uph * SECONDS_PER_HOUR
            )
            lines.append(f"Estimated queue-based lead time: {format_time(queue_lead_time)}")
            lines.append("")
        lines.append("Consider reducing batch sizes and implementing pull systems.")
        lines.append("")

    # Theory of Constraints
    if metrics.is_raw_material_bottleneck:
        constraint = "Raw material supply"
    elif bottleneck is not None:
        constraint = (
            f"Op {bottleneck.step} "
            f"({operation_name(bottleneck.step, bottleneck.stations, op_names)})"
        )
    else:
        constraint = "No operations defined"
    lines.append("### Theory of Constraints Summary")
    lines.append("")
    lines.append(f"1. **IDENTIFY** the constraint: {constraint}")
    lines.append("2. **EXPLOIT** the constraint: Ensure it never waits for work")
    lines.append("3. **SUBORDINATE** everything else: Match pace to the constraint")
    lines.append("4. **ELEVATE** the constraint: Add capacity only here")
    lines.append("5. **REPEAT**: Find the new constraint after improvement")
    lines.append("")

    lines.append("---")
    lines.append("")
    lines.append("*Report generated by CellStatus VSM Builder*")

    return "\n".join(lines)


def export_vsm_text(name: str, description: str, stations: Sequence[Station]) -> str:
    """Plain-text station listing."""
    lines = [f"VSM: {name}"]
    if description:
        lines.append(f"Description: {description}")
    lines.append("")
    lines.append("Stations:")
    for s in stations:
        machine = f" (machine: {s.machine_id})" if s.machine_id else ""
        lines.append(f"- Op {s.step}: {s.name}{machine}")
    return "\n".join(lines)
