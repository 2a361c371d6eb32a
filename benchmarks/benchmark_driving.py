#!/usr/bin/env python3
"""
Benchmark script for the focused source driving functions.

Measures throughput of the vectorized evaluation for growing numbers of
secondary sources and compares one batched call against row-by-row calls.

Usage:
    python benchmarks/benchmark_driving.py
    python benchmarks/benchmark_driving.py --quick
    python benchmarks/benchmark_driving.py --json
"""

from __future__ import annotations

import argparse
import json
import time
from dataclasses import asdict, dataclass

import numpy as np

from focused_wfs import WFSConfig, focused_source_driving
from focused_wfs.core.config import LEGAL_MODELS


@dataclass
class BatchResult:
    """Results from a batch throughput benchmark."""

    dimension: str
    model: str
    num_sources: int
    time_ms: float
    throughput_msources: float


@dataclass
class LoopResult:
    """Batched vs row-by-row evaluation."""

    num_sources: int
    batch_time_ms: float
    loop_time_ms: float
    speedup: float


def make_array(num_sources: int) -> tuple[np.ndarray, np.ndarray]:
    """Linear array along x at y=0 facing -y."""
    x = np.linspace(-10.0, 10.0, num_sources)
    x0 = np.stack([x, np.zeros_like(x), np.zeros_like(x)], axis=1)
    nx0 = np.tile([0.0, -1.0, 0.0], (num_sources, 1))
    return x0, nx0


def benchmark_batch(conf: WFSConfig, num_sources: int, repeats: int = 5) -> BatchResult:
    """Best-of-N time for one batched call.

    Args:
        conf: Configuration to evaluate
        num_sources: Number of secondary sources
        repeats: Number of timed calls

    Returns:
        BatchResult with the fastest call
    """
    x0, nx0 = make_array(num_sources)
    xs = np.array([0.3, -1.0, 0.0])

    best = float("inf")
    for _ in range(repeats):
        start = time.perf_counter()
        focused_source_driving(x0, nx0, xs, conf)
        best = min(best, time.perf_counter() - start)

    return BatchResult(
        dimension=conf.dimension.value,
        model=conf.driving_function_model.value,
        num_sources=num_sources,
        time_ms=best * 1e3,
        throughput_msources=num_sources / best / 1e6,
    )


def benchmark_loop(num_sources: int) -> LoopResult:
    """Compare a batched call to one call per secondary source."""
    conf = WFSConfig(dimension="2.5D", reference_point=(0.0, -3.0, 0.0))
    x0, nx0 = make_array(num_sources)
    xs = np.array([0.3, -1.0, 0.0])

    start = time.perf_counter()
    focused_source_driving(x0, nx0, xs, conf)
    batch_time = time.perf_counter() - start

    start = time.perf_counter()
    for i in range(num_sources):
        focused_source_driving(x0[i], nx0[i], xs, conf)
    loop_time = time.perf_counter() - start

    return LoopResult(
        num_sources=num_sources,
        batch_time_ms=batch_time * 1e3,
        loop_time_ms=loop_time * 1e3,
        speedup=loop_time / batch_time,
    )


def main():
    parser = argparse.ArgumentParser(
        description="Benchmark focused source driving functions",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python benchmarks/benchmark_driving.py              # Full benchmark
  python benchmarks/benchmark_driving.py --quick      # Quick test
  python benchmarks/benchmark_driving.py --json       # JSON output
        """,
    )
    parser.add_argument(
        "--quick",
        action="store_true",
        help="Run quick benchmark with smaller arrays",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Output results in JSON format",
    )
    args = parser.parse_args()

    sizes = [1_000, 10_000] if args.quick else [1_000, 10_000, 100_000, 1_000_000]
    loop_sizes = [100] if args.quick else [100, 1_000]

    if not args.json:
        print("=" * 80)
        print("FOCUSED SOURCE DRIVING FUNCTION BENCHMARK")
        print("=" * 80)
        print()

    batch_results = []
    for dimension, models in LEGAL_MODELS.items():
        for model in sorted(models, key=lambda m: m.value):
            conf = WFSConfig(
                dimension=dimension,
                driving_function_model=model,
                reference_point=(0.0, -3.0, 0.0),
            )
            for n in sizes:
                batch_results.append(benchmark_batch(conf, n))

    loop_results = [benchmark_loop(n) for n in loop_sizes]

    if args.json:
        output = {
            "batch": [asdict(r) for r in batch_results],
            "loop": [asdict(r) for r in loop_results],
        }
        print(json.dumps(output, indent=2))
        return

    print(f"{'Dimension':<10} {'Model':<18} {'Sources':>10} {'Time (ms)':>12} {'Msources/s':>12}")
    print("-" * 66)
    for r in batch_results:
        print(
            f"{r.dimension:<10} {r.model:<18} {r.num_sources:>10} "
            f"{r.time_ms:>12.3f} {r.throughput_msources:>12.1f}"
        )

    print()
    print(f"{'Sources':>10} {'Batch (ms)':>12} {'Loop (ms)':>12} {'Speedup':>10}")
    print("-" * 48)
    for r in loop_results:
        print(
            f"{r.num_sources:>10} {r.batch_time_ms:>12.3f} "
            f"{r.loop_time_ms:>12.1f} {r.speedup:>9.0f}x"
        )


if __name__ == "__main__":
    main()
