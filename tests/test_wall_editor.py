#!/usr/bin/env python3
"""
Tests for wall edits: graph rewiring paired with flow field repair, both the
single-tile approximate repair and the propagating relaxation.
"""

import numpy as np
import pytest

from tileflow.constants import UNREACHABLE
from tileflow.errors import InvalidCoordinateError
from tileflow.flow_field import FlowField
from tileflow.grid_graph import GridGraph
from tileflow.wall_editor import WallEditor


def make_editor(tiles, goal, propagate=False, seed=None):
    graph = GridGraph(tiles, seed=seed)
    field = FlowField(graph)
    field.rebuild(goal)
    return WallEditor(graph, field, propagate=propagate)


class TestPlacement:
    """Placing walls."""

    def test_placed_tile_becomes_unreachable(self, open_tiles):
        editor = make_editor(open_tiles(5, 5), (0, 0))

        distance = editor.set_wall(2, 2, True)

        assert distance == UNREACHABLE
        assert editor.flow_field.distance(2, 2) == UNREACHABLE
        assert editor.graph.neighbor_count(2, 2) == 0
        assert (2, 2) not in set(editor.graph.neighbor_tiles(2, 1))

    def test_steering_avoids_new_wall(self, open_tiles):
        editor = make_editor(open_tiles(5, 5), (0, 0), seed=6)
        editor.set_wall(1, 0, True)
        editor.set_wall(0, 1, True)

        # (1, 1) has no improving neighbor left; its old routes are walled off
        for _ in range(20):
            step = editor.flow_field.next_step_toward(1, 1, randomize_ties=True)
            assert step not in ((1, 0), (0, 1))

    def test_placing_twice_is_harmless(self, open_tiles):
        editor = make_editor(open_tiles(4, 4), (0, 0))
        editor.set_wall(2, 2, True)
        edges = editor.graph.edge_count()
        assert editor.set_wall(2, 2, True) == UNREACHABLE
        assert editor.graph.edge_count() == edges


class TestLocalRepair:
    """Clearing walls without propagation."""

    def test_clear_restores_neighbor_based_distance(self, open_tiles):
        editor = make_editor(open_tiles(5, 5), (0, 0))
        editor.set_wall(2, 2, True)

        distance = editor.set_wall(2, 2, False)

        assert distance == 4
        assert editor.flow_field.distance(2, 2) == 4
        assert editor.graph.neighbor_count(2, 2) == 4

    def test_clear_without_finite_neighbor_stays_unreachable(self, open_tiles):
        tiles = open_tiles(5, 5)
        for x, y in [(1, 2), (3, 2), (2, 1), (2, 3), (2, 2)]:
            tiles[x, y] = True
        editor = make_editor(tiles, (0, 0))

        assert editor.set_wall(2, 2, False) == UNREACHABLE
        assert editor.graph.neighbor_count(2, 2) == 0

    def test_reconnection_only_fixes_edited_tile(self, open_tiles):
        tiles = open_tiles(5, 3)
        tiles[2, :] = True
        editor = make_editor(tiles, (0, 1))
        assert editor.flow_field.distance(4, 1) == UNREACHABLE

        assert editor.set_wall(2, 1, False) == 2

        # Far side keeps its stale distances until a full rebuild
        assert editor.flow_field.distance(3, 1) == UNREACHABLE
        assert editor.flow_field.distance(4, 1) == UNREACHABLE

        editor.flow_field.rebuild((0, 1))
        assert editor.flow_field.distance(4, 1) == 4

    def test_clearing_goal_restores_zero(self, open_tiles):
        editor = make_editor(open_tiles(5, 5), (2, 2))
        editor.set_wall(2, 2, True)
        assert editor.flow_field.distance(2, 2) == UNREACHABLE

        assert editor.set_wall(2, 2, False) == 0
        assert editor.flow_field.next_step_toward(2, 2) is None


class TestPropagatingRepair:
    """Clearing walls with worklist relaxation."""

    def test_reconnection_relaxes_far_side(self, open_tiles, oracle):
        tiles = open_tiles(5, 3)
        tiles[2, :] = True
        editor = make_editor(tiles, (0, 1), propagate=True)

        editor.set_wall(2, 1, False)

        updated = editor.graph.passability()
        for (x, y), hops in oracle(updated, (0, 1)).items():
            assert editor.flow_field.distance(x, y) == hops

    def test_per_call_override(self, open_tiles):
        tiles = open_tiles(5, 3)
        tiles[2, :] = True
        editor = make_editor(tiles, (0, 1), propagate=False)

        editor.set_wall(2, 1, False, propagate=True)

        assert editor.flow_field.distance(4, 1) == 4

    def test_random_clears_stay_exact(self, random_tiles):
        tiles = random_tiles(16, 16, 0.45, 14)
        tiles[0, 0] = False
        editor = make_editor(tiles, (0, 0), propagate=True)
        rng = np.random.default_rng(2)

        walls = [tuple(int(v) for v in cell) for cell in np.argwhere(tiles)]
        order = rng.permutation(len(walls))
        for i in order[:40]:
            editor.set_wall(*walls[i], False)

        reference = FlowField(GridGraph(editor.graph.passability()))
        reference.rebuild((0, 0))
        np.testing.assert_array_equal(editor.flow_field.distance_map, reference.distance_map)

    def test_set_walls_bulk(self, open_tiles):
        editor = make_editor(open_tiles(6, 6), (0, 0), propagate=True)
        column = [(3, y) for y in range(6)]

        assert editor.set_walls(column, True) == 6
        assert all(editor.graph.is_wall(x, y) for x, y in column)

        assert editor.set_walls(column, False) == 6
        assert editor.flow_field.distance(5, 5) == 10


class TestEditsDuringBuild:
    """Edits made between advance_build calls of an unfinished build."""

    @staticmethod
    def start_building(tiles, goal, propagate):
        graph = GridGraph(tiles, seed=3)
        field = FlowField(graph)
        build = field.begin_rebuild(goal)
        return WallEditor(graph, field, propagate=propagate), build

    @staticmethod
    def fresh_map(editor, goal):
        reference = FlowField(GridGraph(editor.graph.passability()))
        reference.rebuild(goal)
        return reference.distance_map

    @pytest.mark.parametrize("propagate", [False, True])
    def test_cleared_tile_keeps_short_route(self, open_tiles, propagate):
        tiles = open_tiles(3, 4)
        tiles[1, 0:3] = True  # column wall, only gap at (1, 3)
        editor, build = self.start_building(tiles, (0, 0), propagate)

        assert not build.advance(1)
        assert editor.set_wall(1, 0, False) == 1
        while not build.advance(1):
            pass

        field = editor.flow_field
        assert [field.distance(1, 0), field.distance(2, 0)] == [1, 2]
        assert [field.distance(2, 1), field.distance(2, 2)] == [3, 4]
        np.testing.assert_array_equal(field.distance_map, self.fresh_map(editor, (0, 0)))

    @pytest.mark.parametrize("propagate", [False, True])
    def test_wall_on_reached_tile_restarts_build(self, open_tiles, propagate):
        editor, build = self.start_building(open_tiles(5, 5), (0, 0), propagate)

        build.advance(4)
        assert editor.flow_field.distance(1, 0) == 1
        editor.set_wall(1, 0, True)

        assert editor.flow_field.active_build is build
        assert not build.done
        assert editor.flow_field.distance(2, 0) == UNREACHABLE
        while not build.advance(2):
            pass

        assert editor.flow_field.distance(2, 0) == 4
        np.testing.assert_array_equal(
            editor.flow_field.distance_map, self.fresh_map(editor, (0, 0))
        )

    @pytest.mark.parametrize("propagate", [False, True])
    def test_random_edits_between_frames(self, random_tiles, propagate):
        tiles = random_tiles(14, 12, 0.35, 21)
        tiles[7, 6] = False
        editor, build = self.start_building(tiles, (7, 6), propagate)
        rng = np.random.default_rng(9)

        for _ in range(30):
            if build.advance(3):
                break
            x, y = (int(v) for v in rng.integers(0, (14, 12)))
            if (x, y) == (7, 6):
                continue
            editor.set_wall(x, y, not editor.graph.is_wall(x, y))
        while not build.advance(3):
            pass

        np.testing.assert_array_equal(
            editor.flow_field.distance_map, self.fresh_map(editor, (7, 6))
        )


class TestEditorContract:
    """Argument validation."""

    def test_out_of_bounds_edit(self, open_tiles):
        editor = make_editor(open_tiles(3, 3), (0, 0))
        with pytest.raises(InvalidCoordinateError):
            editor.set_wall(3, 3, True)

    def test_rejects_field_from_other_graph(self, open_tiles):
        graph = GridGraph(open_tiles(3, 3))
        other = FlowField(GridGraph(open_tiles(3, 3)))
        with pytest.raises(ValueError):
            WallEditor(graph, other)

    def test_edges_symmetric_after_edits(self, random_tiles):
        editor = make_editor(random_tiles(10, 10, 0.3, 1), (0, 0))
        rng = np.random.default_rng(8)
        for _ in range(100):
            x, y = (int(v) for v in rng.integers(0, 10, size=2))
            editor.set_wall(x, y, bool(rng.random() < 0.5))

        graph = editor.graph
        for index in range(graph.size):
            for neighbor in graph.neighbors(index):
                assert index in set(graph.neighbors(neighbor))
