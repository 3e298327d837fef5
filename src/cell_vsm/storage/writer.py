"""DuckDB store for saved value stream maps."""

import json
import logging
import uuid
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional

import duckdb
import pandas as pd

from cell_vsm.engine import calculate_detailed_metrics
from cell_vsm.models import (
    DEFAULT_STATION_DEFAULTS,
    StationDefaults,
    SystemMetrics,
    VsmDocument,
)
from cell_vsm.stations import normalize_stations
from cell_vsm.storage.schema import create_tables

logger = logging.getLogger(__name__)

SUMMARY_COLUMNS = [
    "id",
    "name",
    "status",
    "stations",
    "bottleneck_rate",
    "process_efficiency",
    "updated_at",
]


class ConfigurationNotFoundError(KeyError):
    """Raised when a saved map id does not exist."""


class VsmStore:
    """Reads and writes value stream maps in a DuckDB database.

    The station list is stored as an opaque JSON blob. System throughput and
    process efficiency are computed at save time and stored next to it for
    cheap list views; callers needing current figures use current_metrics().
    """

    def __init__(
        self,
        db_path: Path | str,
        defaults: StationDefaults = DEFAULT_STATION_DEFAULTS,
    ):
        """Open the database and ensure the schema exists.

        Args:
            db_path: Path to DuckDB database file
            defaults: Station policy used when taking snapshots
        """
        self.db_path = Path(db_path)
        self.defaults = defaults
        self.conn = duckdb.connect(str(self.db_path))
        self._ensure_schema()

    def _ensure_schema(self) -> None:
        """Create tables if they don't exist."""
        create_tables(self.conn)

    def __enter__(self) -> "VsmStore":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def close(self) -> None:
        """Close the database connection."""
        self.conn.close()

    # --- writes ---

    def create(self, document: VsmDocument, config_id: Optional[str] = None) -> str:
        """Insert a new map and return its id."""
        config_id = config_id or str(uuid.uuid4())
        metrics = self._metrics(document)
        now = datetime.now()
        self.conn.execute(
            """
            INSERT INTO vsm_configurations (
                id, name, description, status, stations_json,
                bottleneck_rate, process_efficiency, notes, created_at, updated_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            [
                config_id,
                document.name,
                document.description,
                document.status,
                json.dumps(document.stations_json()),
                metrics.system_throughput_uph,
                metrics.process_efficiency_percent,
                document.notes,
                now,
                now,
            ],
        )
        logger.info(
            "Saved map %r as %s (%.1f UPH, %.1f%% efficiency)",
            document.name,
            config_id,
            metrics.system_throughput_uph,
            metrics.process_efficiency_percent,
        )
        return config_id

    def update(self, config_id: str, document: VsmDocument) -> VsmDocument:
        """Replace a stored map and refresh its snapshot.

        Raises:
            ConfigurationNotFoundError: If config_id does not exist
        """
        self._require(config_id)
        metrics = self._metrics(document)
        self.conn.execute(
            """
            UPDATE vsm_configurations
            SET name = ?, description = ?, status = ?, stations_json = ?,
                bottleneck_rate = ?, process_efficiency = ?, notes = ?,
                updated_at = ?
            WHERE id = ?
            """,
            [
                document.name,
                document.description,
                document.status,
                json.dumps(document.stations_json()),
                metrics.system_throughput_uph,
                metrics.process_efficiency_percent,
                document.notes,
                datetime.now(),
                config_id,
            ],
        )
        logger.info("Updated map %s", config_id)
        return document

    def delete(self, config_id: str) -> bool:
        """Delete a map; returns False if it did not exist."""
        if not self._exists(config_id):
            return False
        self.conn.execute("DELETE FROM vsm_configurations WHERE id = ?", [config_id])
        logger.info("Deleted map %s", config_id)
        return True

    # --- reads ---

    def get(self, config_id: str) -> VsmDocument:
        """Load a stored map document.

        Raises:
            ConfigurationNotFoundError: If config_id does not exist
        """
        row = self.conn.execute(
            """
            SELECT name, description, status, notes, stations_json
            FROM vsm_configurations WHERE id = ?
            """,
            [config_id],
        ).fetchone()
        if row is None:
            raise ConfigurationNotFoundError(config_id)
        name, description, status, notes, blob = row
        return self._document_from_row(name, description, status, notes, blob)

    def snapshot(self, config_id: str) -> Dict[str, Optional[float]]:
        """Metrics stored at save time (may be stale)."""
        row = self.conn.execute(
            "SELECT bottleneck_rate, process_efficiency FROM vsm_configurations WHERE id = ?",
            [config_id],
        ).fetchone()
        if row is None:
            raise ConfigurationNotFoundError(config_id)
        return {"bottleneck_rate": row[0], "process_efficiency": row[1]}

    def current_metrics(self, config_id: str) -> SystemMetrics:
        """Recompute metrics from the stored station list."""
        return self._metrics(self.get(config_id))

    def list_maps(self) -> pd.DataFrame:
        """Summary of all saved maps, most recently updated first."""
        rows = self.conn.execute(
            """
            SELECT id, name, status, stations_json, bottleneck_rate,
                   process_efficiency, updated_at
            FROM vsm_configurations
            ORDER BY updated_at DESC
            """
        ).fetchall()
        if not rows:
            return pd.DataFrame(columns=SUMMARY_COLUMNS)

        records = []
        for config_id, name, status, blob, rate, efficiency, updated_at in rows:
            records.append(
                {
                    "id": config_id,
                    "name": name,
                    "status": status,
                    "stations": len(normalize_stations(self._load_blob(blob))),
                    "bottleneck_rate": rate,
                    "process_efficiency": efficiency,
                    "updated_at": updated_at,
                }
            )
        return pd.DataFrame(records, columns=SUMMARY_COLUMNS)

    # --- helpers ---

    def _metrics(self, document: VsmDocument) -> SystemMetrics:
        return calculate_detailed_metrics(
            document.stations, document.config, self.defaults
        )

    def _exists(self, config_id: str) -> bool:
        row = self.conn.execute(
            "SELECT 1 FROM vsm_configurations WHERE id = ?", [config_id]
        ).fetchone()
        return row is not None

    def _require(self, config_id: str) -> None:
        if not self._exists(config_id):
            raise ConfigurationNotFoundError(config_id)

    @staticmethod
    def _load_blob(blob: Any) -> Any:
        if isinstance(blob, str):
            return json.loads(blob)
        return blob

    def _document_from_row(
        self,
        name: str,
        description: Optional[str],
        status: Optional[str],
        notes: Optional[str],
        blob: Any,
    ) -> VsmDocument:
        data = self._load_blob(blob) or {}
        meta = data if isinstance(data, dict) else {}
        return VsmDocument(
            name=name,
            description=description or "",
            status=status or "active",
            notes=notes,
            raw_material_uph=meta.get("rawMaterialUPH"),
            operation_names=meta.get("operationNames") or {},
            stations=normalize_stations(data),
        )
