"""Pydantic schemas for value stream map inputs and derived metrics."""

from typing import Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

# Seconds in one hour, used for every UPH <-> cycle time conversion
SECONDS_PER_HOUR = 3600.0

# Substituted when a station has no usable cycle time
DEFAULT_CYCLE_TIME_SEC = 60.0

# Uptime divisor bounds (percent)
MIN_UPTIME_PERCENT = 0.01
MAX_UPTIME_PERCENT = 100.0


class StationDefaults(BaseModel):
    """Policy values applied to stations with missing or invalid fields."""

    model_config = ConfigDict(frozen=True)

    default_cycle_time_sec: float = DEFAULT_CYCLE_TIME_SEC
    min_uptime_percent: float = MIN_UPTIME_PERCENT
    max_uptime_percent: float = MAX_UPTIME_PERCENT


DEFAULT_STATION_DEFAULTS = StationDefaults()


class Station(BaseModel):
    """A process station (one machine) in a value stream map.

    Numeric fields are deliberately loose: absent or non-positive values are
    accepted here and defaulted by the cycle calculator.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str
    name: str = ""
    process_step: Optional[int] = Field(default=None, alias="processStep")
    cycle_time: Optional[float] = Field(default=None, alias="cycleTime")  # seconds per unit
    setup_time: Optional[float] = Field(default=None, alias="setupTime")  # seconds per batch
    batch_size: Optional[float] = Field(default=None, alias="batchSize")  # pieces per setup
    uptime_percent: Optional[float] = Field(default=None, alias="uptimePercent")
    wip_before: Optional[float] = Field(default=None, alias="wipBefore")  # units queued upstream
    machine_id: Optional[str] = Field(default=None, alias="machineId")
    machine_id_display: Optional[str] = Field(default=None, alias="machineIdDisplay")

    @property
    def step(self) -> int:
        """Process step number, defaulting to 1."""
        return self.process_step or 1


class Machine(BaseModel):
    """A cell machine with the attributes a VSM station is seeded from."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str
    name: str
    machine_id: str = Field(alias="machineId")
    cell: Optional[str] = None
    ideal_cycle_time: Optional[float] = Field(default=None, alias="idealCycleTime")
    setup_time: Optional[float] = Field(default=None, alias="setupTime")
    batch_size: Optional[int] = Field(default=None, alias="batchSize")
    uptime_percent: Optional[float] = Field(default=None, alias="uptimePercent")


class ProcessStep(BaseModel):
    """All stations sharing one process step, treated as parallel machines."""

    model_config = ConfigDict(frozen=True)

    step: int
    stations: Tuple[Station, ...]
    machines: int
    avg_station_ct: float  # mean per-unit CT, not a capacity figure
    combined_rate_uph: float
    effective_ct_sec: float
    per_machine_avg_uph: float
    wip_before: float = 0.0

    # Relative to the system constraint, filled in by the engine
    avg_util_percent: float = 0.0
    waiting_time_sec: float = 0.0


class VsmConfig(BaseModel):
    """Optional engine configuration."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    raw_material_uph: Optional[float] = Field(default=None, alias="rawMaterialUPH")


class SystemMetrics(BaseModel):
    """System-wide metrics derived from a station list."""

    model_config = ConfigDict(frozen=True)

    steps: Tuple[ProcessStep, ...] = ()
    system_throughput_uph: float = 0.0
    process_capacity_uph: float = 0.0
    system_ct_sec: float = 0.0
    total_lead_time_sec: float = 0.0
    total_wip: float = 0.0
    process_efficiency_percent: float = 0.0
    value_add_time_sec: float = 0.0
    total_waiting_time_sec: float = 0.0
    avg_utilization_percent: float = 0.0
    bottleneck_step: Optional[ProcessStep] = None
    is_raw_material_bottleneck: bool = False
    raw_material_uph: Optional[float] = None

    @property
    def cell_balance_percent(self) -> float:
        """Alias of process_efficiency_percent used in reports."""
        return self.process_efficiency_percent

    @property
    def station_count(self) -> int:
        return sum(step.machines for step in self.steps)


class VsmDocument(BaseModel):
    """A saved value stream map: stations plus editor settings."""

    model_config = ConfigDict(populate_by_name=True)

    name: str
    description: str = ""
    status: str = "active"
    notes: Optional[str] = None
    raw_material_uph: Optional[float] = Field(default=None, alias="rawMaterialUPH")
    operation_names: Dict[int, str] = Field(default_factory=dict, alias="operationNames")
    stations: List[Station] = Field(default_factory=list)

    @property
    def config(self) -> VsmConfig:
        """Engine configuration carried by this document."""
        return VsmConfig(raw_material_uph=self.raw_material_uph)

    def stations_json(self) -> Dict:
        """Blob layout stored alongside the document (camelCase keys)."""
        return {
            "stations": [
                s.model_dump(by_alias=True, exclude_none=True) for s in self.stations
            ],
            "rawMaterialUPH": self.raw_material_uph,
            "operationNames": {str(k): v for k, v in self.operation_names.items()},
        }
