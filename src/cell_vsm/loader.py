"""YAML configuration loader for value stream maps."""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from cell_vsm.models import (
    DEFAULT_CYCLE_TIME_SEC,
    MAX_UPTIME_PERCENT,
    MIN_UPTIME_PERCENT,
    StationDefaults,
    VsmDocument,
)
from cell_vsm.stations import normalize_stations

logger = logging.getLogger(__name__)


@dataclass
class DefaultsConfig:
    """Global defaults loaded from config/defaults.yaml."""

    station: Dict[str, Any] = field(default_factory=dict)
    storage: Dict[str, Any] = field(default_factory=dict)

    @property
    def station_defaults(self) -> StationDefaults:
        """Station policy values, falling back to the built-in constants."""
        return StationDefaults(
            default_cycle_time_sec=self.station.get(
                "default_cycle_time_sec", DEFAULT_CYCLE_TIME_SEC
            ),
            min_uptime_percent=self.station.get(
                "min_uptime_percent", MIN_UPTIME_PERCENT
            ),
            max_uptime_percent=self.station.get(
                "max_uptime_percent", MAX_UPTIME_PERCENT
            ),
        )

    @property
    def db_path(self) -> Optional[str]:
        return self.storage.get("db_path")


class ConfigLoader:
    """Loads value stream map documents and defaults from a config directory.

    Layout:
        config/defaults.yaml      - station policy and storage settings
        config/maps/<name>.yaml   - one value stream map per file
    """

    def __init__(self, config_dir: Path | str = "config"):
        self.config_dir = Path(config_dir)
        self.defaults = self.load_defaults()

    @property
    def maps_dir(self) -> Path:
        return self.config_dir / "maps"

    def load_defaults(self) -> DefaultsConfig:
        """Load global defaults from config/defaults.yaml."""
        path = self.config_dir / "defaults.yaml"
        if not path.exists():
            return DefaultsConfig()
        data = self._load_yaml(path)
        return DefaultsConfig(
            station=data.get("station") or {},
            storage=data.get("storage") or {},
        )

    def list_maps(self) -> List[str]:
        """Names of all map configs (without .yaml extension)."""
        if not self.maps_dir.exists():
            return []
        return sorted(p.stem for p in self.maps_dir.glob("*.yaml"))

    def load_map(self, name: str) -> VsmDocument:
        """Load a map config by name."""
        return self.load_map_file(self.maps_dir / f"{name}.yaml")

    def load_map_file(self, path: Path | str) -> VsmDocument:
        """Load a map config from an explicit path."""
        path = Path(path)
        data = self._load_yaml(path)
        return self.parse_map(data, default_name=path.stem)

    def parse_map(
        self, data: Dict[str, Any], default_name: str = "Untitled"
    ) -> VsmDocument:
        """Parse a map document; station entries may use any accepted key style."""
        stations = normalize_stations(data.get("stations") or data.get("stationsJson"))
        raw_uph = data.get("raw_material_uph", data.get("rawMaterialUPH"))
        operation_names = (
            data.get("operation_names") or data.get("operationNames") or {}
        )
        document = VsmDocument(
            name=data.get("name") or default_name,
            description=data.get("description") or "",
            status=data.get("status") or "active",
            notes=data.get("notes"),
            raw_material_uph=raw_uph,
            operation_names=operation_names,
            stations=stations,
        )
        logger.debug(
            "Parsed map %r with %d stations", document.name, len(document.stations)
        )
        return document

    def _load_yaml(self, path: Path) -> Dict[str, Any]:
        """Load a YAML file."""
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")
        with open(path) as f:
            data = yaml.safe_load(f) or {}
        if not isinstance(data, dict):
            raise ValueError(f"Expected a mapping at top level of {path}")
        return data
