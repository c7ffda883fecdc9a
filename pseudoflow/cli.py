"""Command-line interface for pseudoflow."""

from __future__ import annotations

import argparse
import dataclasses
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

from pseudoflow.algorithms.base import BucketOrder, RootSelection
from pseudoflow.algorithms.max_flow import calc_max_flow
from pseudoflow.algorithms.types import MaxFlowResult
from pseudoflow.config import SolverConfig, load_config
from pseudoflow.io import (
    DimacsFormatError,
    DimacsProblem,
    format_result,
    read_dimacs_file,
    write_result,
)
from pseudoflow.logging import get_logger, set_global_log_level

logger = get_logger(__name__)


def _build_config(
    config_path: Optional[Path], highest_label: bool, lifo: bool
) -> SolverConfig:
    """Load the config file (if any) and apply command-line switches on top."""
    config = load_config(config_path) if config_path else SolverConfig()
    if highest_label:
        config = dataclasses.replace(config, root_selection=RootSelection.HIGHEST_LABEL)
    if lifo:
        config = dataclasses.replace(config, bucket_order=BucketOrder.LIFO)
    return config


def _solve(path: str, config: SolverConfig) -> tuple[DimacsProblem, MaxFlowResult]:
    logger.info(f"Reading DIMACS problem from: {'stdin' if path == '-' else path}")
    problem = read_dimacs_file(path)
    result = calc_max_flow(
        problem.num_nodes, problem.arcs, problem.source, problem.sink, config=config
    )
    logger.info(
        f"Max flow {result.flow_value} computed in {result.timings.total:.6f}s"
    )
    return problem, result


def _run(
    path: str,
    config_path: Optional[Path],
    highest_label: bool,
    lifo: bool,
    output: Optional[Path],
    stats: bool,
    timings: bool,
    as_json: bool,
) -> None:
    """Solve a DIMACS problem and emit the result report."""
    try:
        config = _build_config(config_path, highest_label, lifo)
        problem, result = _solve(path, config)
    except DimacsFormatError as e:
        logger.error(f"Invalid DIMACS input: {e}")
        sys.exit(1)
    except (ValueError, OSError) as e:
        logger.error(f"Failed to solve: {type(e).__name__}: {e}")
        sys.exit(1)

    if as_json:
        lines = [json.dumps(result.to_dict(), indent=2)]
    else:
        header = "stdin" if path == "-" else Path(path).name
        lines = format_result(result, problem.arcs, header=header)
        if stats:
            lines.append(f"c Statistics {result.stats.to_json()}")
        if timings:
            lines.append(f"c Timings {json.dumps(result.timings.to_dict())}")

    if output is not None:
        try:
            write_result(lines, output)
        except OSError as e:
            logger.error(f"Failed to write results: {e}")
            sys.exit(1)
        logger.info(f"Results written to: {output}")
    else:
        write_result(lines, sys.stdout)


def _check(path: str, config_path: Optional[Path]) -> None:
    """Solve and exit non-zero unless the flow is feasible and optimal."""
    try:
        config = _build_config(config_path, False, False)
        _, result = _solve(path, config)
    except DimacsFormatError as e:
        logger.error(f"Invalid DIMACS input: {e}")
        sys.exit(1)
    except (ValueError, OSError) as e:
        logger.error(f"Failed to solve: {type(e).__name__}: {e}")
        sys.exit(1)

    for message in result.report.violations:
        logger.warning(message)
    if not result.optimal:
        print(f"NOT OPTIMAL: flow {result.flow_value}, cut {result.min_cut_value}")
        sys.exit(1)
    print(f"OPTIMAL: {result.flow_value}")


def main(argv: Optional[List[str]] = None) -> None:
    """Entry point for the ``pseudoflow`` command.

    Args:
        argv: Optional list of command-line arguments. If ``None``, ``sys.argv``
            is used.
    """
    parser = argparse.ArgumentParser(
        prog="pseudoflow",
        description="Solve DIMACS maximum-flow problems with the pseudoflow algorithm.",
    )

    parser.add_argument(
        "--verbose", "-v", action="store_true", help="Enable debug logging"
    )
    parser.add_argument(
        "--quiet", action="store_true", help="Only log warnings and errors"
    )

    subparsers = parser.add_subparsers(
        dest="command",
        required=True,
        title="Available commands",
        metavar="{run,check}",
        help="Available commands",
    )

    run_parser = subparsers.add_parser("run", help="Solve a DIMACS max-flow problem")
    run_parser.add_argument("input", help="DIMACS file, or '-' for stdin")
    run_parser.add_argument(
        "--highest-label",
        action="store_true",
        help="Process strong roots in highest-label order",
    )
    run_parser.add_argument(
        "--lifo", action="store_true", help="Use LIFO buckets instead of FIFO"
    )
    run_parser.add_argument(
        "--config", type=Path, default=None, help="YAML file with solver settings"
    )
    run_parser.add_argument(
        "--output",
        "-o",
        type=Path,
        default=None,
        help="Write the result here instead of stdout",
    )
    run_parser.add_argument(
        "--stats", action="store_true", help="Append operation counters"
    )
    run_parser.add_argument(
        "--timings", action="store_true", help="Append per-phase timings"
    )
    run_parser.add_argument(
        "--json", action="store_true", help="Emit the result as a JSON document"
    )

    check_parser = subparsers.add_parser(
        "check", help="Solve and verify that the flow is feasible and optimal"
    )
    check_parser.add_argument("input", help="DIMACS file, or '-' for stdin")
    check_parser.add_argument(
        "--config", type=Path, default=None, help="YAML file with solver settings"
    )

    effective_args = sys.argv[1:] if argv is None else argv

    # If no arguments are provided, show help and exit cleanly
    if not effective_args:
        parser.print_help()
        raise SystemExit(0)

    args = parser.parse_args(effective_args)

    if args.verbose:
        set_global_log_level(logging.DEBUG)
        logger.debug("Debug logging enabled")
    elif args.quiet:
        set_global_log_level(logging.WARNING)
    else:
        set_global_log_level(logging.INFO)

    if args.command == "run":
        _run(
            path=args.input,
            config_path=args.config,
            highest_label=args.highest_label,
            lifo=args.lifo,
            output=args.output,
            stats=args.stats,
            timings=args.timings,
            as_json=args.json,
        )
    elif args.command == "check":
        _check(args.input, args.config)


if __name__ == "__main__":
    main()
