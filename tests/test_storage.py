"""Tests for DuckDB storage module."""

import json
from pathlib import Path

import duckdb
import pandas as pd
import pytest

from cell_vsm import (
    ConfigLoader,
    ConfigurationNotFoundError,
    Station,
    StationDefaults,
    VsmDocument,
    VsmStore,
    save_map,
)
from cell_vsm.storage import connect, get_db_path
from cell_vsm.storage.schema import SCHEMA_DDL, create_tables
from cell_vsm.storage.writer import SUMMARY_COLUMNS


@pytest.fixture
def document(two_step_stations) -> VsmDocument:
    return VsmDocument(
        name="Two Step Line",
        description="Minimal line",
        notes="first draft",
        operation_names={2: "Weld"},
        stations=two_step_stations,
    )


@pytest.fixture
def store(db_path: Path):
    with VsmStore(db_path) as store:
        yield store


class TestSchemaCreation:
    """Tests for schema DDL and table creation."""

    def test_schema_ddl_is_valid_sql(self, db_path: Path):
        conn = duckdb.connect(str(db_path))
        conn.execute(SCHEMA_DDL)
        conn.close()

    def test_create_tables_is_idempotent(self, db_path: Path):
        conn = duckdb.connect(str(db_path))
        create_tables(conn)
        create_tables(conn)
        tables = conn.execute(
            "SELECT table_name FROM information_schema.tables"
        ).fetchall()
        names = {t[0] for t in tables}
        conn.close()
        assert "vsm_configurations" in names
        assert "v_vsm_summary" in names


class TestCreateAndGet:
    """Round trips through the store."""

    def test_get_returns_document(self, store: VsmStore, document: VsmDocument):
        config_id = store.create(document)
        loaded = store.get(config_id)

        assert loaded.name == "Two Step Line"
        assert loaded.description == "Minimal line"
        assert loaded.notes == "first draft"
        assert loaded.operation_names == {2: "Weld"}
        assert [s.id for s in loaded.stations] == ["a", "b"]
        assert loaded.stations[1].cycle_time == 60

    def test_explicit_id(self, store: VsmStore, document: VsmDocument):
        assert store.create(document, config_id="line-1") == "line-1"
        assert store.get("line-1").name == "Two Step Line"

    def test_blob_uses_camel_case_keys(self, store: VsmStore, document: VsmDocument):
        config_id = store.create(document)
        blob = store.conn.execute(
            "SELECT stations_json FROM vsm_configurations WHERE id = ?", [config_id]
        ).fetchone()[0]
        data = json.loads(blob)
        assert data["stations"][0]["processStep"] == 1
        assert data["stations"][0]["cycleTime"] == 30
        assert data["rawMaterialUPH"] is None
        assert data["operationNames"] == {"2": "Weld"}

    def test_raw_material_rate_round_trips(self, store: VsmStore, document: VsmDocument):
        limited = document.model_copy(update={"raw_material_uph": 40.0})
        config_id = store.create(limited)
        assert store.get(config_id).raw_material_uph == 40.0
        assert store.current_metrics(config_id).is_raw_material_bottleneck is True

    def test_missing_id_raises(self, store: VsmStore):
        with pytest.raises(ConfigurationNotFoundError):
            store.get("nope")
        with pytest.raises(KeyError):
            store.snapshot("nope")


class TestSnapshot:
    """Save-time metrics stored next to the blob."""

    def test_snapshot_values(self, store: VsmStore, document: VsmDocument):
        config_id = store.create(document)
        snap = store.snapshot(config_id)
        assert snap["bottleneck_rate"] == pytest.approx(60.0)
        assert snap["process_efficiency"] == pytest.approx(75.0)

    def test_snapshot_goes_stale_on_direct_edit(self, store: VsmStore, document: VsmDocument):
        config_id = store.create(document)
        blob = {"stations": [{"id": "a", "processStep": 1, "cycleTime": 120}]}
        store.conn.execute(
            "UPDATE vsm_configurations SET stations_json = ? WHERE id = ?",
            [json.dumps(blob), config_id],
        )

        assert store.snapshot(config_id)["bottleneck_rate"] == pytest.approx(60.0)
        assert store.current_metrics(config_id).system_throughput_uph == pytest.approx(30.0)

    def test_snapshot_uses_store_defaults(self, db_path: Path):
        document = VsmDocument(name="Bare", stations=[Station(id="x")])
        defaults = StationDefaults(default_cycle_time_sec=120.0)
        with VsmStore(db_path, defaults) as store:
            config_id = store.create(document)
            assert store.snapshot(config_id)["bottleneck_rate"] == pytest.approx(30.0)


class TestUpdateAndDelete:
    """Tests for update() and delete()."""

    def test_update_refreshes_snapshot(self, store: VsmStore, document: VsmDocument):
        config_id = store.create(document)
        faster = [
            Station(id="a", name="Saw", process_step=1, cycle_time=30),
            Station(id="b", name="Welder", process_step=2, cycle_time=40),
        ]
        store.update(config_id, document.model_copy(update={"stations": faster}))

        assert store.snapshot(config_id)["bottleneck_rate"] == pytest.approx(90.0)
        assert store.get(config_id).stations[1].cycle_time == 40

    def test_update_missing_raises(self, store: VsmStore, document: VsmDocument):
        with pytest.raises(ConfigurationNotFoundError):
            store.update("nope", document)

    def test_delete(self, store: VsmStore, document: VsmDocument):
        config_id = store.create(document)
        assert store.delete(config_id) is True
        assert store.delete(config_id) is False
        with pytest.raises(ConfigurationNotFoundError):
            store.get(config_id)


class TestListMaps:
    """Tests for list_maps()."""

    def test_empty_store(self, store: VsmStore):
        df = store.list_maps()
        assert df.empty
        assert list(df.columns) == SUMMARY_COLUMNS

    def test_summary_rows(self, store: VsmStore, loader: ConfigLoader):
        for name in ("two_step_line", "machining_cell"):
            store.create(loader.load_map(name))

        df = store.list_maps()
        assert isinstance(df, pd.DataFrame)
        assert len(df) == 2
        counts = dict(zip(df["name"], df["stations"]))
        assert counts == {"Two Step Line": 2, "Machining Cell": 5}

    def test_summary_view(self, store: VsmStore, document: VsmDocument):
        store.create(document)
        rows = store.conn.execute("SELECT name, bottleneck_rate FROM v_vsm_summary").fetchall()
        assert rows[0][0] == "Two Step Line"
        assert rows[0][1] == pytest.approx(60.0)


class TestModuleHelpers:
    """Tests for save_map(), connect() and get_db_path()."""

    def test_save_map(self, db_path: Path, document: VsmDocument):
        config_id = save_map(document, db_path)
        assert db_path.exists()

        conn = connect(db_path)
        count = conn.execute(
            "SELECT COUNT(*) FROM vsm_configurations WHERE id = ?", [config_id]
        ).fetchone()[0]
        conn.close()
        assert count == 1

    def test_default_db_path(self):
        assert get_db_path() == Path("./cell_vsm.duckdb")
