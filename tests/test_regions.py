"""
Unit tests for region assignment.
"""

import logging

import numpy as np
import pytest

from gradient_map.errors import ConfigurationError
from gradient_map.model.grid import Floorplan
from gradient_map.model.regions import (
    RegionMap, UNASSIGNED, assign_regions, build_static_mask
)
from gradient_map.model.sensors import Sensor


class TestAssignRegions:

    def test_no_sensors_rejected(self, bordered_10x5):
        with pytest.raises(ConfigurationError):
            assign_regions(bordered_10x5, [])

    def test_two_sensors_split_at_midpoint(self, bordered_10x5):
        regions = assign_regions(bordered_10x5, [Sensor(0, 2, 2), Sensor(1, 7, 2)])

        for y in range(1, 4):
            for x in range(1, 9):
                assert regions.owner(x, y) in (0, 1)
        assert regions.owner(4, 2) == 0
        assert regions.owner(5, 2) == 1
        assert regions.unassigned_count(bordered_10x5) == 0
        assert regions.region_sizes() == {0: 12, 1: 12}

    def test_walls_stay_unassigned(self, bordered_10x5):
        regions = assign_regions(bordered_10x5, [Sensor(0, 2, 2)])
        assert regions.owner(0, 0) is None
        assert regions.owner(9, 2) is None
        assert regions.ids[0, 0] == UNASSIGNED

    def test_single_sensor_owns_whole_room(self):
        plan = Floorplan.with_border(5, 5)
        regions = assign_regions(plan, [Sensor(0, 2, 2)])
        interior = regions.ids[1:4, 1:4]
        assert interior.shape == (3, 3)
        assert np.all(interior == 0)

    def test_tie_goes_to_lowest_id(self):
        plan = Floorplan.with_border(7, 3)
        # (3,1) ends up with one neighbor of each sensor
        regions = assign_regions(plan, [Sensor(5, 1, 1), Sensor(2, 5, 1)])
        assert regions.owner(2, 1) == 5
        assert regions.owner(4, 1) == 2
        assert regions.owner(3, 1) == 2

        mirrored = assign_regions(plan, [Sensor(2, 1, 1), Sensor(5, 5, 1)])
        assert mirrored.owner(3, 1) == 2

    def test_result_independent_of_sensor_order(self, bordered_10x5):
        sensors = [Sensor(0, 2, 1), Sensor(1, 7, 3), Sensor(2, 5, 2)]
        forward = assign_regions(bordered_10x5, sensors)
        backward = assign_regions(bordered_10x5, list(reversed(sensors)))
        assert np.array_equal(forward.ids, backward.ids)

    def test_enclosed_room_left_unassigned(self, caplog):
        plan = Floorplan.with_border(9, 5)
        plan.add_wall_line(4, 0, 4, 4)
        with caplog.at_level(logging.WARNING):
            regions = assign_regions(plan, [Sensor(0, 2, 2)])

        assert regions.owner(2, 2) == 0
        assert regions.owner(6, 2) is None
        assert regions.unassigned_count(plan) == 9
        assert "unassigned" in caplog.text

    def test_pass_cap_returns_partial_map(self, caplog):
        plan = Floorplan.with_border(10, 3)
        with caplog.at_level(logging.WARNING):
            regions = assign_regions(plan, [Sensor(0, 1, 1)], max_passes=2)

        assert regions.owner(2, 1) == 0
        assert regions.owner(3, 1) == 0
        assert regions.owner(4, 1) is None
        assert "pass cap" in caplog.text

    def test_outer_ring_never_grows(self):
        plan = Floorplan(5, 5)  # no walls at all
        regions = assign_regions(plan, [Sensor(0, 2, 2)])
        assert np.all(regions.ids[1:4, 1:4] == 0)
        assert regions.owner(0, 0) is None
        assert regions.owner(4, 2) is None

    def test_first_sensor_keeps_shared_cell(self):
        plan = Floorplan.with_border(5, 5)
        regions = assign_regions(plan, [Sensor(3, 2, 2), Sensor(1, 2, 2)])
        assert regions.owner(2, 2) == 3
        assert np.all(regions.ids[1:4, 1:4] == 3)

    def test_sensor_on_wall_rejected(self, bordered_10x5):
        with pytest.raises(ConfigurationError):
            assign_regions(bordered_10x5, [Sensor(0, 0, 0)])

    def test_sensor_outside_rejected(self, bordered_10x5):
        with pytest.raises(ConfigurationError):
            assign_regions(bordered_10x5, [Sensor(0, 20, 2)])

    def test_growth_does_not_cross_walls(self):
        plan = Floorplan.with_border(9, 5)
        plan.add_wall_line(4, 0, 4, 4)
        regions = assign_regions(plan, [Sensor(0, 2, 2), Sensor(1, 6, 2)])
        assert np.all(regions.ids[1:4, 1:4] == 0)
        assert np.all(regions.ids[1:4, 5:8] == 1)


class TestRegionMap:

    def test_list_round_trip(self):
        region_map = RegionMap(np.array([[-1, 0], [1, -1]]))
        restored = RegionMap.from_list(region_map.to_list())
        assert np.array_equal(restored.ids, region_map.ids)
        assert restored.owner(0, 0) is None
        assert restored.owner(1, 0) == 0

    def test_static_mask_marks_sensor_cells_only(self, bordered_10x5):
        mask = build_static_mask(bordered_10x5, [Sensor(0, 2, 2), Sensor(1, 7, 3)])
        assert mask.dtype == bool
        assert mask.sum() == 2
        assert mask[2, 2] and mask[3, 7]
