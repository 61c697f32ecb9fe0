"""
Tests for the heatmap engine (simulation context).
"""

import numpy as np
import pytest

from gradient_map.config import parse_config
from gradient_map.errors import ConfigurationError, UnknownSensorError
from gradient_map.export.region_cache import RegionCache
from gradient_map.model import engine as engine_module
from gradient_map.model.engine import HeatmapEngine
from gradient_map.model.gradient import RED, WHITE_RED
from gradient_map.model.grid import CellType, Floorplan


class TestConfiguration:

    def test_add_sensor_requires_floorplan(self):
        with pytest.raises(ConfigurationError):
            HeatmapEngine().add_sensor(1, 1, 0)

    def test_compute_regions_without_sensors(self):
        engine = HeatmapEngine(Floorplan.with_border(5, 5))
        with pytest.raises(ConfigurationError):
            engine.compute_regions()

    def test_floorplan_frozen_once_configured(self):
        plan = Floorplan.with_border(5, 5)
        HeatmapEngine(plan)
        with pytest.raises(ValueError):
            plan.cells[2, 2] = CellType.WALL

    def test_new_floorplan_must_keep_sensors_on_air(self, single_sensor_engine):
        engine = single_sensor_engine
        engine.initialize_field()
        original = engine.floorplan

        walled = Floorplan.with_border(5, 5)
        walled.add_wall_points([(2, 2)])
        with pytest.raises(ConfigurationError):
            engine.configure_floorplan(walled)
        assert engine.floorplan is original
        assert engine.field is not None

    def test_new_floorplan_invalidates_derived_grids(self, single_sensor_engine):
        engine = single_sensor_engine
        engine.initialize_field()
        engine.configure_floorplan(Floorplan.with_border(6, 6))
        assert engine.region_map is None
        assert engine.static_mask is None
        assert engine.field is None

    def test_add_sensor_invalidates_regions(self, single_sensor_engine):
        engine = single_sensor_engine
        engine.compute_regions()
        engine.add_sensor(1, 1, 1)
        assert engine.region_map is None

    def test_reading_update_keeps_regions(self, single_sensor_engine):
        engine = single_sensor_engine
        regions = engine.compute_regions()
        engine.set_sensor_reading(0, 2500)
        assert engine.region_map is regions
        assert engine.get_sensor_reading(0) == 2500

    def test_unknown_sensor_reading(self, single_sensor_engine):
        with pytest.raises(UnknownSensorError):
            single_sensor_engine.set_sensor_reading(9, 100)
        assert single_sensor_engine.get_sensor_reading(9) is None


class TestFieldLifecycle:

    def test_single_sensor_field(self, single_sensor_engine):
        field = single_sensor_engine.initialize_field()
        assert np.all(field[1:4, 1:4] == 2000)
        assert single_sensor_engine.region_map.unassigned_count(
            single_sensor_engine.floorplan) == 0

    def test_default_value_falls_back_to_seed(self):
        engine = HeatmapEngine(Floorplan.with_border(5, 5), seed_value=1750)
        engine.add_sensor(2, 2, 0)
        field = engine.initialize_field()
        assert np.all(field[1:4, 1:4] == 1750)

    def test_step_requires_initialized_field(self, single_sensor_engine):
        with pytest.raises(ConfigurationError):
            single_sensor_engine.step_field()

    def test_step_advances_one_pass(self, two_source_engine):
        engine = two_source_engine
        engine.initialize_field(default_value=500)
        before = engine.field.copy()

        snapshot = engine.step_field()
        assert snapshot.step == 1
        assert engine.current_step == 1
        assert snapshot.metrics['max_change'] == pytest.approx(
            np.max(np.abs(engine.field - before)))
        # sensor cells pinned
        assert engine.field[2, 1] == 0
        assert engine.field[2, 5] == 1000

    def test_relax_stops_at_tolerance(self, single_sensor_engine):
        snapshot = single_sensor_engine.relax(max_steps=100, tolerance=0.0)
        # uniform field is already a fixed point
        assert snapshot.step == 1
        assert snapshot.metrics['max_change'] == 0.0

    def test_relax_honours_max_steps(self, two_source_engine):
        snapshot = two_source_engine.relax(max_steps=3, tolerance=0.0)
        assert snapshot.step == 3

    def test_reinitialize_after_reading_change(self, single_sensor_engine):
        engine = single_sensor_engine
        engine.relax(max_steps=5)
        engine.set_sensor_reading(0, 3000)
        field = engine.initialize_field()
        assert engine.current_step == 0
        assert np.all(field[1:4, 1:4] == 3000)

    def test_snapshot_metrics(self, two_source_engine):
        two_source_engine.initialize_field(default_value=500)
        snapshot = two_source_engine.snapshot()
        assert snapshot.metrics['min'] == 0
        assert snapshot.metrics['max'] == 1000
        rows = snapshot.to_csv_rows()
        assert len(rows) == 15
        assert {'step', 'x', 'y', 'region', 'value'} == set(rows[0])

    def test_summary(self, two_source_engine):
        two_source_engine.initialize_field()
        summary = two_source_engine.get_summary()
        assert summary['sensors'] == 2
        assert summary['unassigned_cells'] == 0
        assert sum(summary['region_sizes'].values()) == 15


class TestColors:

    def test_color_for(self):
        engine = HeatmapEngine()
        assert engine.color_for(3000) == RED
        assert engine.color_for(10000) == WHITE_RED

    def test_color_image(self, single_sensor_engine):
        single_sensor_engine.set_sensor_reading(0, 3000)
        single_sensor_engine.initialize_field()
        image = single_sensor_engine.color_image()
        assert tuple(image[2, 2]) == tuple(RED)
        assert tuple(image[0, 0]) == (0, 0, 0)


class TestRegionCacheIntegration:

    def test_second_engine_reuses_cached_regions(self, tmp_path, monkeypatch):
        cache = RegionCache(tmp_path / 'regions.json')

        first = HeatmapEngine(Floorplan.with_border(10, 5), region_cache=cache)
        first.add_sensor(2, 2, 0)
        first.add_sensor(7, 2, 1)
        expected = first.compute_regions()
        assert cache.path.exists()

        def fail(*args, **kwargs):
            raise AssertionError("region growth should come from the cache")
        monkeypatch.setattr(engine_module, 'assign_regions', fail)

        second = HeatmapEngine(Floorplan.with_border(10, 5), region_cache=cache)
        second.add_sensor(2, 2, 0)
        second.add_sensor(7, 2, 1)
        assert np.array_equal(second.compute_regions().ids, expected.ids)


class TestFromConfig:

    def test_builds_scenario(self):
        config = parse_config({
            'floorplan': {
                'width': 10,
                'height': 5,
                'walls': [{'type': 'points', 'coords': [[5, 1]], 'cell_type': 'internal_door'}],
            },
            'sensors': [
                {'id': 0, 'x': 2, 'y': 2, 'value': 2100},
                {'id': 1, 'x': 7, 'y': 2},
            ],
            'field': {'seed': 1900},
        })
        engine = HeatmapEngine.from_config(config)
        assert engine.floorplan.cell_type(5, 1) == CellType.INTERNAL_DOOR
        assert engine.get_sensor_reading(0) == 2100
        assert engine.get_sensor_reading(1) is None

        field = engine.initialize_field()
        assert field[2, 2] == 2100
        assert field[2, 7] == 1900

    def test_sensor_on_wall_in_config(self):
        config = parse_config({
            'floorplan': {'width': 6, 'height': 6},
            'sensors': [{'id': 0, 'x': 0, 'y': 3}],
        })
        with pytest.raises(ConfigurationError):
            HeatmapEngine.from_config(config)
