from __future__ import annotations

import argparse
import csv
import json
import logging
import math
from pathlib import Path
from time import perf_counter
from typing import Optional

from ..sim.core.config import SimulationConfig
from ..sim.core.simulation import Simulation
from ..sim.types.metrics import TickMetrics

logger = logging.getLogger(__name__)

_HEADER = [
    "tick",
    "count",
    "neighbor_checks",
    "avg_neighbors",
    "avg_speed",
    "max_speed",
    "tick_ms",
]

# Matches the reference benchmark: 100 boids in a 600x600 arena, 120 updates.
BENCH_COUNT = 100
BENCH_STEPS = 120
BENCH_ARENA = 600.0


def _format_row(metrics: TickMetrics, tick_ms: float) -> list[object]:
    return [
        metrics.tick,
        metrics.count,
        metrics.neighbor_checks,
        f"{metrics.average_neighbors:.4f}",
        f"{metrics.average_speed:.4f}",
        f"{metrics.max_speed:.4f}",
        f"{tick_ms:.3f}",
    ]


def _percentile(sorted_values: list[float], percentile: float) -> float:
    if not sorted_values:
        return 0.0
    if len(sorted_values) == 1:
        return float(sorted_values[0])
    pos = (len(sorted_values) - 1) * percentile
    low = int(math.floor(pos))
    high = int(math.ceil(pos))
    if low == high:
        return float(sorted_values[low])
    weight = pos - low
    return float(sorted_values[low] + (sorted_values[high] - sorted_values[low]) * weight)


def _summary_stats(values: list[float]) -> dict[str, float]:
    if not values:
        return {"min": 0.0, "max": 0.0, "avg": 0.0, "p50": 0.0, "p90": 0.0, "p95": 0.0, "p99": 0.0}
    sorted_values = sorted(values)
    return {
        "min": float(sorted_values[0]),
        "max": float(sorted_values[-1]),
        "avg": float(sum(values) / len(values)),
        "p50": _percentile(sorted_values, 0.50),
        "p90": _percentile(sorted_values, 0.90),
        "p95": _percentile(sorted_values, 0.95),
        "p99": _percentile(sorted_values, 0.99),
    }


def run_headless(
    steps: int,
    seed: Optional[int],
    log_path: Optional[Path],
    deterministic_log: bool = False,
    summary_path: Optional[Path] = None,
    summary_window: int = 1000,
    config: Optional[SimulationConfig] = None,
) -> Simulation:
    config = config if config is not None else SimulationConfig()
    if seed is not None:
        config.seed = seed
    simulation = Simulation(config)
    logger.info("headless run: %d boids, %d steps, seed=%s", config.count, steps, config.seed)

    writer = None
    csv_file = None
    if log_path:
        csv_file = Path(log_path).open("w", newline="")
        writer = csv.writer(csv_file)
        writer.writerow(_HEADER)

    tick_ms_series: list[float] = []
    speed_series: list[float] = []
    neighbor_series: list[float] = []

    try:
        for tick in range(steps):
            metrics = simulation.step(tick)
            tick_ms = 0.0 if deterministic_log else metrics.tick_duration_ms
            tick_ms_series.append(tick_ms)
            speed_series.append(metrics.average_speed)
            neighbor_series.append(metrics.average_neighbors)
            if writer:
                writer.writerow(_format_row(metrics, tick_ms))
    finally:
        if csv_file:
            csv_file.close()

    if summary_path:
        window = max(1, int(summary_window))
        tail_slice = slice(max(0, len(tick_ms_series) - window), len(tick_ms_series))
        summary = {
            "steps": steps,
            "seed": config.seed,
            "count": config.count,
            "deterministic_log": deterministic_log,
            "tick_ms": _summary_stats(tick_ms_series),
            "average_speed": _summary_stats(speed_series),
            "average_neighbors": _summary_stats(neighbor_series),
            "tail_window": {
                "window": window,
                "tick_ms": _summary_stats(tick_ms_series[tail_slice]),
                "average_speed": _summary_stats(speed_series[tail_slice]),
                "average_neighbors": _summary_stats(neighbor_series[tail_slice]),
            },
        }
        Path(summary_path).write_text(json.dumps(summary, indent=2))
        logger.info("summary written to %s", summary_path)

    return simulation


def run_benchmark(
    count: int = BENCH_COUNT,
    steps: int = BENCH_STEPS,
    repeats: int = 10,
    seed: int = 0,
) -> dict[str, object]:
    """Time ``repeats`` fresh flocks of ``count`` boids advanced ``steps`` ticks each."""
    if repeats < 1:
        raise ValueError(f"repeats must be at least 1, got {repeats}")
    run_ms: list[float] = []
    for repeat in range(repeats):
        config = SimulationConfig(count=count, width=BENCH_ARENA, height=BENCH_ARENA, seed=seed + repeat)
        start = perf_counter()
        simulation = Simulation(config)
        for tick in range(steps):
            simulation.step(tick)
        run_ms.append((perf_counter() - start) * 1000.0)
    result = {
        "count": count,
        "steps": steps,
        "repeats": repeats,
        "run_ms": _summary_stats(run_ms),
        "update_ms_avg": (sum(run_ms) / len(run_ms)) / steps if steps else 0.0,
    }
    logger.info("benchmark %d boids x %d updates: avg %.3f ms/run", count, steps, result["run_ms"]["avg"])
    return result


def main() -> None:
    parser = argparse.ArgumentParser(description="Headless flock simulation")
    parser.add_argument("--steps", type=int, default=3000)
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument("--count", type=int, default=None, help="Number of boids (overrides the config file).")
    parser.add_argument("--config", type=Path, default=None, help="YAML simulation config")
    parser.add_argument("--log", type=Path, default=None, help="CSV file to write per-tick metrics")
    parser.add_argument(
        "--summary",
        type=Path,
        default=None,
        help="Optional JSON file to write summary stats for the run.",
    )
    parser.add_argument(
        "--summary-window",
        type=int,
        default=1000,
        help="Tail window size (ticks) for summary stats.",
    )
    parser.add_argument(
        "--deterministic-log",
        action="store_true",
        help="Write deterministic CSV (tick_ms is forced to 0.000 so identical seeds match).",
    )
    parser.add_argument(
        "--bench",
        action="store_true",
        help=f"Run the benchmark ({BENCH_COUNT} boids, {BENCH_STEPS} updates per run) instead of a logged run.",
    )
    parser.add_argument("--repeats", type=int, default=10, help="Benchmark repetitions.")
    parser.add_argument("--log-level", default="INFO", choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    args = parser.parse_args()
    logging.basicConfig(level=args.log_level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    if args.bench:
        result = run_benchmark(count=args.count or BENCH_COUNT, repeats=args.repeats)
        print(json.dumps(result, indent=2))
        return

    config = SimulationConfig.from_yaml(args.config) if args.config else SimulationConfig()
    if args.count is not None:
        config.count = args.count
    run_headless(
        args.steps,
        args.seed,
        args.log,
        deterministic_log=args.deterministic_log,
        summary_path=args.summary,
        summary_window=args.summary_window,
        config=config,
    )


if __name__ == "__main__":
    main()
