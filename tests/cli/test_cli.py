import json
from pathlib import Path

import pytest

from gridcut import cli

CORRIDOR_YAML = """
terrain: |
  .....
  .S.#.
  ##.##
  .....
  ..T..
"""

WALL_CELLS = {8, 10, 11, 13, 14}


@pytest.fixture
def terrain_file(tmp_path: Path) -> Path:
    path = tmp_path / "corridor.yaml"
    path.write_text(CORRIDOR_YAML)
    return path


def test_cut_writes_results_file(terrain_file: Path, tmp_path: Path) -> None:
    results_path = tmp_path / "out" / "cut.json"

    cli.main(["--quiet", "cut", str(terrain_file), "--results", str(results_path)])

    data = json.loads(results_path.read_text())
    assert data["terrain"] == {"size": 5, "walls": 5, "sources": 1, "sinks": 1}
    assert data["model"] == "vertex"
    assert data["max_flow"] == 1
    assert data["cut_cells"] == [12]
    assert data["reachable_cells"] == [0, 1, 2, 3, 4, 5, 6, 7, 9]


def test_cut_prints_to_stdout_by_default(terrain_file: Path, capsys) -> None:
    cli.main(["--quiet", "cut", str(terrain_file), "--model", "edge"])

    data = json.loads(capsys.readouterr().out)
    assert data["model"] == "edge"
    assert data["max_flow"] == 2
    assert data["cut_cells"] == [12]


def test_cut_results_and_stdout(terrain_file: Path, tmp_path: Path, capsys) -> None:
    results_path = tmp_path / "cut.json"

    cli.main(
        ["--quiet", "cut", str(terrain_file), "-r", str(results_path), "--stdout"]
    )

    printed = json.loads(capsys.readouterr().out)
    assert printed == json.loads(results_path.read_text())


def test_cut_uses_model_from_terrain_file(tmp_path: Path) -> None:
    path = tmp_path / "edge.yaml"
    path.write_text(CORRIDOR_YAML + "model: edge\n")
    results_path = tmp_path / "cut.json"

    cli.main(["--quiet", "cut", str(path), "-r", str(results_path)])

    assert json.loads(results_path.read_text())["model"] == "edge"


def test_cut_dense_matches_sparse(terrain_file: Path, tmp_path: Path) -> None:
    sparse_path = tmp_path / "sparse.json"
    dense_path = tmp_path / "dense.json"

    cli.main(["--quiet", "cut", str(terrain_file), "-r", str(sparse_path)])
    cli.main(["--quiet", "cut", str(terrain_file), "--dense", "-r", str(dense_path)])

    assert json.loads(sparse_path.read_text()) == json.loads(dense_path.read_text())


def test_distance_raw(terrain_file: Path, tmp_path: Path) -> None:
    results_path = tmp_path / "distance.json"

    cli.main(["--quiet", "distance", str(terrain_file), "-r", str(results_path)])

    data = json.loads(results_path.read_text())
    assert data["adjacency"] == "raw"
    cells = {cell for cell, _ in data["distances"]}
    assert cells == set(range(25)) - WALL_CELLS
    assert all(value >= 0 for _, value in data["distances"])


def test_distance_residual(terrain_file: Path, tmp_path: Path) -> None:
    results_path = tmp_path / "distance.json"

    cli.main(
        [
            "--quiet",
            "distance",
            str(terrain_file),
            "--adjacency",
            "residual",
            "-r",
            str(results_path),
        ]
    )

    data = json.loads(results_path.read_text())
    assert data["adjacency"] == "residual"
    cells = {cell for cell, _ in data["distances"]}
    assert cells <= set(range(25)) - WALL_CELLS


def test_no_arguments_prints_help(capsys) -> None:
    with pytest.raises(SystemExit) as exc_info:
        cli.main([])
    assert exc_info.value.code == 0
    assert "usage: gridcut" in capsys.readouterr().out


def test_missing_terrain_file_exits_with_error(tmp_path: Path, caplog) -> None:
    with pytest.raises(SystemExit) as exc_info:
        cli.main(["cut", str(tmp_path / "missing.yaml")])
    assert exc_info.value.code == 1
    assert "Terrain file not found" in caplog.text


def test_invalid_terrain_exits_with_error(tmp_path: Path, caplog) -> None:
    path = tmp_path / "bad.yaml"
    path.write_text("terrain: |\n  S?\n  .T\n")

    with pytest.raises(SystemExit) as exc_info:
        cli.main(["distance", str(path)])
    assert exc_info.value.code == 1
    assert "Unknown terrain symbol" in caplog.text


def test_invalid_model_choice_rejected_by_argparse(terrain_file: Path) -> None:
    with pytest.raises(SystemExit) as exc_info:
        cli.main(["cut", str(terrain_file), "--model", "planar"])
    assert exc_info.value.code == 2


def test_verbose_enables_debug(terrain_file: Path, tmp_path: Path, caplog) -> None:
    results_path = tmp_path / "cut.json"
    with caplog.at_level("DEBUG", logger="gridcut"):
        cli.main(["--verbose", "cut", str(terrain_file), "-r", str(results_path)])
    assert "Debug logging enabled" in caplog.text
    assert "Cut computed in" in caplog.text


def test_format_duration() -> None:
    assert cli._format_duration(0.1234) == "123.4 ms"
    assert cli._format_duration(2.5) == "2.50 s"
