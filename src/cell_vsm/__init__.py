"""Value stream map metrics for manufacturing cells."""

from cell_vsm.cli import analyze, flow, list_saved, report, save
from cell_vsm.config import (
    ConfigLoader,
    DefaultsConfig,
    StationDefaults,
    VsmConfig,
    VsmDocument,
)
from cell_vsm.cycle import (
    effective_cycle_time,
    per_unit_cycle_time,
    station_throughput_uph,
)
from cell_vsm.engine import (
    calculate_detailed_metrics,
    calculate_system_metrics,
    simulate_vsm,
)
from cell_vsm.export import (
    export_vsm_markdown,
    export_vsm_text,
    format_time,
    metrics_to_frame,
)
from cell_vsm.flow import simulate_wip_flow
from cell_vsm.models import Machine, ProcessStep, Station, SystemMetrics
from cell_vsm.run import main
from cell_vsm.stations import (
    add_machine_station,
    group_by_step,
    next_process_step,
    normalize_station,
    normalize_stations,
    normalize_stations_input,
    operation_name,
    station_from_machine,
)
from cell_vsm.steps import aggregate_steps
from cell_vsm.storage import ConfigurationNotFoundError, VsmStore, save_map

__version__ = "0.1.0"

__all__ = [
    # Models
    "Station",
    "Machine",
    "ProcessStep",
    "SystemMetrics",
    # Config
    "ConfigLoader",
    "DefaultsConfig",
    "StationDefaults",
    "VsmConfig",
    "VsmDocument",
    # Engine
    "per_unit_cycle_time",
    "effective_cycle_time",
    "station_throughput_uph",
    "aggregate_steps",
    "calculate_system_metrics",
    "calculate_detailed_metrics",
    "simulate_vsm",
    # Stations
    "normalize_stations_input",
    "normalize_station",
    "normalize_stations",
    "group_by_step",
    "operation_name",
    "next_process_step",
    "station_from_machine",
    "add_machine_station",
    # Reports and flow
    "export_vsm_markdown",
    "export_vsm_text",
    "format_time",
    "metrics_to_frame",
    "simulate_wip_flow",
    # Storage
    "VsmStore",
    "ConfigurationNotFoundError",
    "save_map",
    # CLI
    "analyze",
    "flow",
    "report",
    "save",
    "list_saved",
    "main",
]
