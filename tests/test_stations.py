"""Tests for station normalization and machine linking."""

import pytest

from cell_vsm import (
    Machine,
    Station,
    add_machine_station,
    group_by_step,
    next_process_step,
    normalize_station,
    normalize_stations,
    normalize_stations_input,
    operation_name,
    station_from_machine,
)


class TestNormalizeStationsInput:
    """Tests for extracting the station list from a stored blob."""

    def test_bare_list(self):
        assert normalize_stations_input([{"id": "a"}]) == [{"id": "a"}]

    def test_stations_key(self):
        assert normalize_stations_input({"stations": [{"id": "a"}]}) == [{"id": "a"}]

    def test_stations_json_key(self):
        blob = {"stationsJson": [{"id": "b"}]}
        assert normalize_stations_input(blob) == [{"id": "b"}]

    @pytest.mark.parametrize("blob", [None, {}, "stations", {"stations": "x"}, 42])
    def test_unrecognized_shapes(self, blob):
        assert normalize_stations_input(blob) == []

    def test_returns_copy(self):
        raw = [{"id": "a"}]
        result = normalize_stations_input(raw)
        result.append({"id": "b"})
        assert raw == [{"id": "a"}]


class TestNormalizeStation:
    """Tests for building a Station from loosely keyed data."""

    def test_camel_case_keys(self):
        station = normalize_station(
            {
                "id": "x",
                "name": "Lathe",
                "processStep": 20,
                "cycleTime": 42,
                "setupTime": 300,
                "batchSize": 10,
                "uptimePercent": 90,
                "wipBefore": 4,
                "machineId": "m-1",
                "machineIdDisplay": "LTH-01",
            }
        )
        assert station.id == "x"
        assert station.step == 20
        assert station.cycle_time == 42
        assert station.setup_time == 300
        assert station.batch_size == 10
        assert station.uptime_percent == 90
        assert station.wip_before == 4
        assert station.machine_id == "m-1"
        assert station.machine_id_display == "LTH-01"

    def test_snake_case_and_short_keys(self):
        station = normalize_station(
            {"step": 3, "ct": 12, "setup_time": 60, "batch_size": 6, "uptime_percent": 75}
        )
        assert station.step == 3
        assert station.cycle_time == 12
        assert station.setup_time == 60
        assert station.batch_size == 6
        assert station.uptime_percent == 75

    def test_fallback_id_and_name(self):
        station = normalize_station({"processStep": 30}, index=4)
        assert station.id == "s-4"
        assert station.name == "Op 30"

    def test_fallback_name_without_step(self):
        assert normalize_station({}, index=2).name == "Op 3"

    def test_name_from_nested_machine(self):
        station = normalize_station(
            {"machine": {"id": "m-9", "name": "Grinder", "machineId": "GRD-9"}}
        )
        assert station.name == "Grinder"
        assert station.machine_id == "m-9"
        assert station.machine_id_display == "GRD-9"

    def test_invalid_numbers_become_absent(self):
        station = normalize_station({"cycleTime": "fast", "batchSize": "", "uptimePercent": True})
        assert station.cycle_time is None
        assert station.batch_size is None
        assert station.uptime_percent is None

    def test_numeric_strings_are_parsed(self):
        station = normalize_station({"cycleTime": "45.5", "processStep": "2"})
        assert station.cycle_time == 45.5
        assert station.step == 2

    @pytest.mark.parametrize("value", ["nan", "inf", "-Infinity", float("nan")])
    def test_non_finite_numbers_become_absent(self, value):
        station = normalize_station(
            {"id": "x", "processStep": value, "cycleTime": value, "wipBefore": value}
        )
        assert station.process_step is None
        assert station.step == 1
        assert station.cycle_time is None
        assert station.wip_before is None
        assert station.name == "Op 1"

    def test_numeric_machine_id_is_stringified(self):
        assert normalize_station({"machineId": 17}).machine_id == "17"


class TestNormalizeStations:
    """Tests for normalize_stations()."""

    def test_mixed_entries(self):
        existing = Station(id="keep")
        stations = normalize_stations({"stations": [existing, {"id": "new"}, "junk"]})
        assert [s.id for s in stations] == ["keep", "new"]


class TestGrouping:
    """Tests for group_by_step() and operation_name()."""

    def test_group_by_step_sorted(self):
        stations = [
            Station(id="b", process_step=20),
            Station(id="a", process_step=10),
            Station(id="c", process_step=20),
        ]
        groups = group_by_step(stations)
        assert [step for step, _ in groups] == [10, 20]
        assert [s.id for s in groups[1][1]] == ["b", "c"]

    def test_operation_name_prefers_explicit(self):
        stations = [Station(id="a", name="Mill")]
        assert operation_name(10, stations, {10: "Milling"}) == "Milling"

    def test_operation_name_falls_back_to_station(self):
        stations = [Station(id="a"), Station(id="b", name="Mill")]
        assert operation_name(10, stations, {}) == "Mill"

    def test_operation_name_default(self):
        assert operation_name(10) == "Op 10"
        assert operation_name(10, fallback="Operation {step}") == "Operation 10"


class TestMachineLinking:
    """Tests for seeding stations from cell machines."""

    @pytest.fixture
    def machine(self) -> Machine:
        return Machine(
            id="m-1",
            name="Haas VF-2",
            machine_id="CNC-101",
            ideal_cycle_time=120,
            setup_time=900,
            batch_size=50,
            uptime_percent=92,
        )

    def test_next_process_step(self):
        assert next_process_step([]) == 10
        stations = [Station(id="a", process_step=10), Station(id="b", process_step=25)]
        assert next_process_step(stations) == 35

    def test_station_from_machine(self, machine: Machine):
        station = station_from_machine(machine, [Station(id="a", process_step=10)])
        assert station.step == 20
        assert station.name == "Haas VF-2"
        assert station.machine_id == "m-1"
        assert station.machine_id_display == "CNC-101"
        assert station.cycle_time == 120
        assert station.setup_time == 900
        assert station.batch_size == 50
        assert station.uptime_percent == 92

    def test_station_from_bare_machine_uses_defaults(self):
        machine = Machine(id="m-2", name="Saw", machine_id="SAW-1")
        station = station_from_machine(machine)
        assert station.step == 10
        assert station.cycle_time == 60
        assert station.batch_size == 1
        assert station.uptime_percent == 100

    def test_machine_from_camel_case(self):
        machine = Machine.model_validate(
            {"id": "m", "name": "Saw", "machineId": "SAW-1", "idealCycleTime": 30}
        )
        assert machine.ideal_cycle_time == 30

    def test_add_machine_station_returns_new_list(self, machine: Machine):
        stations = [Station(id="a", process_step=10)]
        updated = add_machine_station(stations, machine)
        assert len(stations) == 1
        assert len(updated) == 2
        assert updated[-1].machine_id == "m-1"

    def test_add_machine_station_rejects_duplicates(self, machine: Machine):
        stations = add_machine_station([], machine)
        with pytest.raises(ValueError, match="already in value stream"):
            add_machine_station(stations, machine)
