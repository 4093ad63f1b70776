#!/usr/bin/env python3
"""
Automated benchmarking script for the parallel word count.
Runs the parallel job and the serial baseline over several configurations
and collects performance metrics.
"""

import argparse
import csv
import json
import sys
from datetime import datetime
from pathlib import Path

import time

from mapred_wordcount.client.monitoring import format_duration, format_progress_bar
from mapred_wordcount.common.config import JobConfig, configure_logging
from mapred_wordcount.common.errors import MapReduceError
from mapred_wordcount.common.text import read_tokens
from mapred_wordcount.coordinator.driver import compare
from mapred_wordcount.coordinator.metrics import MetricsCollector

# Configuration
RESULTS_DIR = Path("benchmark_results")
DEFAULT_INPUT = Path("shared/input/story_large.txt")

# Benchmark configurations
BENCHMARKS = [
    # Experiment 1: Chunk size scaling (one thread per chunk)
    {"name": "chunk_size_10000", "chunk_size": 10_000, "max_workers": None, "backend": "thread",
     "description": "10k tokens per map task"},
    {"name": "chunk_size_50000", "chunk_size": 50_000, "max_workers": None, "backend": "thread",
     "description": "50k tokens per map task"},
    {"name": "chunk_size_200000", "chunk_size": 200_000, "max_workers": None, "backend": "thread",
     "description": "200k tokens per map task (reference default)"},
    {"name": "chunk_size_1000000", "chunk_size": 1_000_000, "max_workers": None, "backend": "thread",
     "description": "1M tokens per map task"},

    # Experiment 2: Bounded thread pool
    {"name": "workers_1", "chunk_size": 50_000, "max_workers": 1, "backend": "thread",
     "description": "Thread pool with 1 worker"},
    {"name": "workers_2", "chunk_size": 50_000, "max_workers": 2, "backend": "thread",
     "description": "Thread pool with 2 workers"},
    {"name": "workers_4", "chunk_size": 50_000, "max_workers": 4, "backend": "thread",
     "description": "Thread pool with 4 workers"},
    {"name": "workers_8", "chunk_size": 50_000, "max_workers": 8, "backend": "thread",
     "description": "Thread pool with 8 workers"},

    # Experiment 3: Process pool
    {"name": "process_2", "chunk_size": 200_000, "max_workers": 2, "backend": "process",
     "description": "Process pool with 2 workers"},
    {"name": "process_4", "chunk_size": 200_000, "max_workers": 4, "backend": "process",
     "description": "Process pool with 4 workers"},
]


def run_benchmark(tokens, config, collector, run_number=1):
    """Run a single benchmark configuration."""
    print(f"\n{'='*70}")
    print(f"Benchmark: {config['name']} (Run {run_number})")
    print(f"Description: {config['description']}")
    print(f"{'='*70}")

    job_config = JobConfig(
        chunk_size=config["chunk_size"],
        max_workers=config["max_workers"],
        backend=config["backend"],
    )

    try:
        _, metrics = compare(tokens, job_config)
    except MapReduceError as e:
        print(f"  ❌ Benchmark failed: {e}")
        return None

    collector.record(metrics)
    print(f"  Parallel: {metrics.parallel_seconds:.4f}s  Serial: {metrics.serial_seconds:.4f}s  "
          f"Speedup: {metrics.speedup:.2f}x")

    return {
        "benchmark_name": config["name"],
        "description": config["description"],
        "run_number": run_number,
        "timestamp": datetime.now().isoformat(),
        "job_id": metrics.job_id,
        "num_tokens": metrics.num_tokens,
        "chunk_size": metrics.chunk_size,
        "num_chunks": metrics.num_chunks,
        "max_workers": metrics.max_workers,
        "backend": metrics.backend,
        "parallelism": metrics.parallelism,
        "parallel_seconds": round(metrics.parallel_seconds, 6),
        "serial_seconds": round(metrics.serial_seconds, 6),
        "speedup": round(metrics.speedup, 3),
        "memory_rss_mb": round(metrics.memory_rss_bytes / 1024 / 1024, 2),
        "success": metrics.results_match,
    }


def save_results(results, timestamp):
    """Save results to JSON and CSV files."""
    # JSON format
    json_file = RESULTS_DIR / f"benchmark_results_{timestamp}.json"
    with open(json_file, 'w') as f:
        json.dump(results, f, indent=2)
    print(f"\n✓ Results saved to: {json_file}")

    # CSV format
    csv_file = RESULTS_DIR / f"benchmark_results_{timestamp}.csv"
    if results:
        fieldnames = list(results[0].keys())
        with open(csv_file, 'w', newline='') as f:
            writer = csv.DictWriter(f, fieldnames=fieldnames)
            writer.writeheader()
            writer.writerows(results)
        print(f"✓ Results saved to: {csv_file}")

    return json_file, csv_file


def print_summary(results):
    """Print a summary table of results."""
    print(f"\n{'='*70}")
    print("BENCHMARK SUMMARY")
    print(f"{'='*70}")
    print(f"{'Benchmark':<22} {'Chunk':>9} {'Workers':>7} {'Parallel':>10} {'Serial':>9} {'Status':>7}")
    print(f"{'-'*70}")

    for r in results:
        workers = r['max_workers'] if r['max_workers'] is not None else '-'
        print(f"{r['benchmark_name']:<22} {r['chunk_size']:>9} {workers:>7} "
              f"{r['parallel_seconds']:>9.3f}s {r['serial_seconds']:>8.3f}s "
              f"{'✓' if r['success'] else '✗':>7}")

    print(f"{'='*70}")

    successful = sum(1 for r in results if r['success'])
    print(f"Total: {len(results)} benchmarks, {successful} successful, "
          f"{len(results) - successful} failed")


def main():
    """Main benchmarking workflow."""
    parser = argparse.ArgumentParser(description="Benchmark parallel vs serial word count")
    parser.add_argument("input", nargs="?", default=str(DEFAULT_INPUT), help="Input text file")
    parser.add_argument("--runs", type=int, default=1, help="Runs per benchmark (1-5)")
    parser.add_argument("--log-level", default="WARNING")
    args = parser.parse_args()

    configure_logging(args.log_level)

    print("="*70)
    print("Parallel Word Count Benchmark Suite")
    print("="*70)

    if not Path(args.input).exists():
        print(f"❌ Missing input file: {args.input}")
        print("   Run scripts/generate_benchmark_inputs.py first")
        return 1

    RESULTS_DIR.mkdir(exist_ok=True)
    tokens = read_tokens(args.input)
    print(f"✓ Loaded {len(tokens)} tokens from {args.input}")

    runs_per_benchmark = max(1, min(5, args.runs))
    total = len(BENCHMARKS) * runs_per_benchmark
    print(f"\nRunning {len(BENCHMARKS)} benchmarks × {runs_per_benchmark} runs = {total} total jobs")

    suite_start = time.perf_counter()
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    collector = MetricsCollector()
    all_results = []

    completed = 0
    for config in BENCHMARKS:
        for run in range(1, runs_per_benchmark + 1):
            result = run_benchmark(tokens, config, collector, run_number=run)
            if result:
                all_results.append(result)
            completed += 1
            print(f"  {format_progress_bar(completed, total)}")

    if not all_results:
        print("\n❌ No results collected")
        return 1

    json_file, _ = save_results(all_results, timestamp)
    collector.save_all(str(RESULTS_DIR / f"metrics_{timestamp}"))
    print_summary(all_results)
    print(f"Suite finished in {format_duration(time.perf_counter() - suite_start)}")

    print(f"\n{'='*70}")
    print("Next steps:")
    print(f"  1. Review results: cat {json_file}")
    print(f"  2. Generate plots: python plot_results.py {json_file}")
    print(f"{'='*70}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
