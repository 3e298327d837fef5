"""Station list normalization and machine linking.

Saved maps keep their stations as a loose JSON blob written by several
versions of the editor, so keys come in camelCase, snake_case and short
forms. Everything here returns new objects and leaves its input alone.
"""

import logging
import math
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from cell_vsm.models import DEFAULT_CYCLE_TIME_SEC, Machine, Station

logger = logging.getLogger(__name__)

# Gap between process step numbers when stations are appended
STEP_INCREMENT = 10

# Accepted spellings per Station field, in lookup order
FIELD_ALIASES: Dict[str, Tuple[str, ...]] = {
    "process_step": ("processStep", "step", "process_step"),
    "cycle_time": ("cycleTime", "ct", "cycle_time"),
    "setup_time": ("setupTime", "setup_time"),
    "batch_size": ("batchSize", "batch_size"),
    "uptime_percent": ("uptimePercent", "uptime_percent"),
    "wip_before": ("wipBefore", "wip_before"),
}


def normalize_stations_input(data: Any) -> List[Any]:
    """Extract the raw station list from a stored stations blob.

    Accepts a bare list or a mapping holding the list under ``stations`` or
    ``stationsJson``. Anything else yields an empty list.
    """
    if not data:
        return []
    if isinstance(data, list):
        return list(data)
    if isinstance(data, Mapping):
        for key in ("stations", "stationsJson"):
            if isinstance(data.get(key), list):
                return list(data[key])
    return []


def _number(value: Any) -> Optional[float]:
    """Coerce to float, treating unparseable or non-finite values as absent."""
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def _first(raw: Mapping[str, Any], keys: Sequence[str]) -> Any:
    for key in keys:
        value = raw.get(key)
        if value is not None and value != "":
            return value
    return None


def normalize_station(raw: Mapping[str, Any], index: int = 0) -> Station:
    """Build a Station from a loosely keyed mapping.

    Args:
        raw: Station entry from a stored blob or YAML file
        index: Position in the list, used for a fallback id

    Returns:
        Station with numeric fields parsed; invalid numbers become None
    """
    machine = raw.get("machine") if isinstance(raw.get("machine"), Mapping) else {}

    values: Dict[str, Any] = {
        field: _number(_first(raw, keys)) for field, keys in FIELD_ALIASES.items()
    }
    step = values.pop("process_step")
    process_step = int(step) if step else None

    name = _first(raw, ("name", "opName", "operationName")) or machine.get("name")
    if not name:
        name = f"Op {process_step or index + 1}"

    machine_id = _first(raw, ("machineId",)) or machine.get("id") or machine.get("machineId")
    machine_display = _first(raw, ("machineIdDisplay",)) or machine.get("machineId")

    return Station(
        id=str(raw.get("id") or f"s-{index}"),
        name=str(name),
        process_step=process_step,
        machine_id=str(machine_id) if machine_id else None,
        machine_id_display=str(machine_display) if machine_display else None,
        **values,
    )


def normalize_stations(data: Any) -> List[Station]:
    """Normalize a stored stations blob into Station records."""
    stations = []
    for index, raw in enumerate(normalize_stations_input(data)):
        if isinstance(raw, Station):
            stations.append(raw)
        elif isinstance(raw, Mapping):
            stations.append(normalize_station(raw, index))
        else:
            logger.warning("Skipping station entry %d of type %s", index, type(raw).__name__)
    return stations


def group_by_step(stations: Iterable[Station]) -> List[Tuple[int, List[Station]]]:
    """Stations grouped by process step, sorted by step number."""
    groups: Dict[int, List[Station]] = {}
    for station in stations:
        groups.setdefault(station.step, []).append(station)
    return sorted(groups.items())


def operation_name(
    step: int,
    stations: Sequence[Station] = (),
    operation_names: Optional[Mapping[int, str]] = None,
    fallback: str = "Op {step}",
) -> str:
    """Display name for an operation.

    Prefers an explicit operation name, then the first station's name.
    """
    if operation_names and operation_names.get(step):
        return operation_names[step]
    for station in stations:
        if station.name:
            return station.name
    return fallback.format(step=step)


def next_process_step(stations: Sequence[Station]) -> int:
    """Step number for a newly appended station."""
    if not stations:
        return STEP_INCREMENT
    return max(s.step for s in stations) + STEP_INCREMENT


def station_from_machine(machine: Machine, stations: Sequence[Station] = ()) -> Station:
    """Seed a new station from a cell machine, appended after existing steps."""
    return Station(
        id=f"{machine.id}-{next_process_step(stations)}",
        name=machine.name,
        machine_id=machine.id,
        machine_id_display=machine.machine_id,
        process_step=next_process_step(stations),
        cycle_time=machine.ideal_cycle_time or DEFAULT_CYCLE_TIME_SEC,
        setup_time=machine.setup_time,
        batch_size=machine.batch_size or 1,
        uptime_percent=machine.uptime_percent or 100.0,
    )


def add_machine_station(stations: Sequence[Station], machine: Machine) -> List[Station]:
    """Return a new station list with the machine appended as its own step.

    Raises:
        ValueError: If the machine is already linked to a station
    """
    if any(s.machine_id == machine.id for s in stations):
        raise ValueError(f"Machine already in value stream: {machine.id}")
    return [*stations, station_from_machine(machine, stations)]
