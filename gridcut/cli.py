"""Command-line interface for gridcut."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from time import perf_counter
from typing import Any, Dict, List, Optional

from gridcut.algorithms.push_relabel import push_relabel_max_flow
from gridcut.config import GRID_CONFIG
from gridcut.grid.terrain import TerrainSnapshot, load_terrain_yaml, terrain_summary
from gridcut.logging import get_logger, level_from_flags, set_global_log_level
from gridcut.results import distance_items
from gridcut.types import Adjacency, CutModel

logger = get_logger(__name__)


def _format_duration(seconds: float) -> str:
    """Return a concise human-readable duration string.

    Examples:
        0.123 -> "123.0 ms"; 1.234 -> "1.23 s".
    """
    if seconds < 1.0:
        return f"{seconds * 1000.0:.1f} ms"
    return f"{seconds:.2f} s"


def _load(path: Path) -> TerrainSnapshot:
    if not path.is_file():
        raise FileNotFoundError(f"Terrain file not found: {path}")
    snapshot = load_terrain_yaml(path.read_text())
    logger.info("Loaded terrain %s: %s", path, terrain_summary(snapshot))
    return snapshot


def _emit(data: Dict[str, Any], results: Optional[Path], stdout: bool) -> None:
    payload = json.dumps(data, indent=2)
    if results is not None:
        results.parent.mkdir(parents=True, exist_ok=True)
        results.write_text(payload)
        logger.info("Results written to %s", results)
    if stdout or results is None:
        print(payload)


def _run_cut(
    path: Path,
    model: Optional[str],
    dense: bool,
    results: Optional[Path],
    stdout: bool,
) -> None:
    snapshot = _load(path)
    cut_model = CutModel.from_string(model) if model else snapshot.model

    start = perf_counter()
    grid_cut = snapshot.to_topology().solve(model=cut_model, dense=dense)
    logger.info("Cut computed in %s", _format_duration(perf_counter() - start))

    data = {"terrain": terrain_summary(snapshot), **grid_cut.to_dict()}
    _emit(data, results, stdout)


def _run_distance(
    path: Path,
    adjacency: str,
    results: Optional[Path],
    stdout: bool,
) -> None:
    snapshot = _load(path)
    topology = snapshot.to_topology()
    mode = Adjacency.from_string(adjacency)
    if mode == Adjacency.USER_DEFINED:
        raise ValueError("Adjacency 'user_defined' is not available from the CLI.")

    start = perf_counter()
    network = topology.build_network(model=CutModel.EDGE)
    if mode == Adjacency.RESIDUAL:
        push_relabel_max_flow(network)
    field = topology.distance_transform(network=network, adjacency=mode)
    logger.info(
        "Distance transform computed in %s", _format_duration(perf_counter() - start)
    )

    data = {
        "terrain": terrain_summary(snapshot),
        "adjacency": mode.name.lower(),
        "distances": distance_items(field.tolist(), GRID_CONFIG.unreached()),
    }
    _emit(data, results, stdout)


def main(argv: Optional[List[str]] = None) -> None:
    """Entry point for the ``gridcut`` command.

    Args:
        argv: Optional list of command-line arguments. If ``None``, ``sys.argv``
            is used.
    """
    parser = argparse.ArgumentParser(
        prog="gridcut",
        description="Compute grid min cuts and distance transforms.",
    )

    parser.add_argument(
        "--verbose", "-v", action="store_true", help="Enable debug logging"
    )
    parser.add_argument(
        "--quiet", action="store_true", help="Suppress informational logs"
    )

    subparsers = parser.add_subparsers(
        dest="command",
        required=True,
        title="Available commands",
        metavar="{cut,distance}",
        help="Available commands",
    )

    cut_parser = subparsers.add_parser(
        "cut", help="Find the cells that separate sources from sinks"
    )
    cut_parser.add_argument("terrain", type=Path, help="Path to terrain YAML")
    cut_parser.add_argument(
        "--model",
        "-m",
        choices=["vertex", "edge"],
        default=None,
        help="Network construction (default: the terrain file's model, else vertex)",
    )
    cut_parser.add_argument(
        "--dense",
        action="store_true",
        help="Use the dense matrix-backed network",
    )

    distance_parser = subparsers.add_parser(
        "distance", help="Compute the distance transform from the outer cells"
    )
    distance_parser.add_argument("terrain", type=Path, help="Path to terrain YAML")
    distance_parser.add_argument(
        "--adjacency",
        "-a",
        choices=["raw", "residual"],
        default="raw",
        help="Walk every edge (raw) or only residual edges after a max-flow solve",
    )

    for p in (cut_parser, distance_parser):
        p.add_argument(
            "--results",
            "-r",
            type=Path,
            default=None,
            help="Write JSON results to this file (default: print to stdout)",
        )
        p.add_argument(
            "--stdout",
            action="store_true",
            help="Also print results to stdout when --results is given",
        )

    effective_args = sys.argv[1:] if argv is None else argv

    if not effective_args:
        parser.print_help()
        raise SystemExit(0)

    args = parser.parse_args(effective_args)

    set_global_log_level(level_from_flags(args.verbose, args.quiet))
    logger.debug("Debug logging enabled")

    try:
        if args.command == "cut":
            _run_cut(args.terrain, args.model, args.dense, args.results, args.stdout)
        elif args.command == "distance":
            _run_distance(args.terrain, args.adjacency, args.results, args.stdout)
    except (FileNotFoundError, ValueError) as exc:
        logger.error("%s", exc)
        raise SystemExit(1) from exc


if __name__ == "__main__":
    main()
