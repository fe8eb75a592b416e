"""Tests for `gridcut.config` defaults and their effect on components."""

import pytest

from gridcut.config import GRID_CONFIG, SOLVER_CONFIG, GridConfig, SolverConfig
from gridcut.graph import DenseFlowNetwork
from gridcut.grid.topology import GridTopology


def test_default_configs() -> None:
    """Defaults describe a 50x50 grid with uint16 distances and no ceiling."""
    assert SolverConfig().max_iterations is None
    assert SolverConfig().log_every == 0
    config = GridConfig()
    assert config.size == 50
    assert config.distance_dtype == "uint16"
    assert config.dense_dtype == "int16"


@pytest.mark.parametrize(
    "dtype, expected",
    [("uint16", 65535), ("uint8", 255), ("int32", 2**31 - 1)],
)
def test_unreached_is_dtype_maximum(dtype: str, expected: int) -> None:
    config = GridConfig(distance_dtype=dtype)
    assert config.unreached() == expected
    assert type(config.unreached()) is int


def test_global_instances_are_shared() -> None:
    from gridcut import config as config_module

    assert config_module.SOLVER_CONFIG is SOLVER_CONFIG
    assert config_module.GRID_CONFIG is GRID_CONFIG


def test_grid_size_default_applies_to_topology(monkeypatch) -> None:
    """Components read the global grid config at call time."""
    monkeypatch.setattr(GRID_CONFIG, "size", 4)
    grid = GridTopology(sources=[0], sinks=[15])
    assert grid.size == 4
    assert grid.cell_count == 16


def test_dense_dtype_default_applies_to_networks(monkeypatch) -> None:
    monkeypatch.setattr(GRID_CONFIG, "dense_dtype", "int32")
    net = DenseFlowNetwork(10)
    assert net.dtype.name == "int32"
    assert net.capacity_ceiling == (2**31 - 1) // 10


def test_distance_dtype_applies_to_transforms(monkeypatch) -> None:
    monkeypatch.setattr(GRID_CONFIG, "distance_dtype", "uint8")
    grid = GridTopology(sources=[0], sinks=[8], walls=[4], size=3)
    field = grid.distance_transform(boundary=[8])
    assert field.dtype.name == "uint8"
    assert field[4] == 255
