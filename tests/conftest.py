"""Shared fixtures for tileflow tests."""

import os
import sys

import networkx as nx
import numpy as np
import pytest

# Add the project root to the Python path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))


def make_open_tiles(width, height):
    """All-passable tensor indexed [x, y]."""
    return np.zeros((width, height), dtype=bool)


def make_random_tiles(width, height, wall_fraction, seed):
    rng = np.random.default_rng(seed)
    return rng.random((width, height)) < wall_fraction


def oracle_distances(tiles, goal):
    """Brute-force hop counts to goal using networkx BFS on an independent grid."""
    width, height = tiles.shape
    graph = nx.grid_2d_graph(width, height)
    graph.remove_nodes_from(
        [(x, y) for x in range(width) for y in range(height) if tiles[x, y]]
    )
    if goal not in graph:
        return {}
    return nx.single_source_shortest_path_length(graph, goal)


def oracle_graph(tiles):
    width, height = tiles.shape
    graph = nx.grid_2d_graph(width, height)
    graph.remove_nodes_from(
        [(x, y) for x in range(width) for y in range(height) if tiles[x, y]]
    )
    return graph


@pytest.fixture
def open_tiles():
    return make_open_tiles


@pytest.fixture
def random_tiles():
    return make_random_tiles


@pytest.fixture
def oracle():
    return oracle_distances


@pytest.fixture
def reference_graph():
    return oracle_graph


def path_is_connected(graph, path):
    """True if every consecutive pair in path is joined by a graph edge."""
    for (ax, ay), b in zip(path, path[1:]):
        if b not in set(graph.neighbor_tiles(ax, ay)):
            return False
    return True


@pytest.fixture
def connected():
    return path_is_connected
