#!/usr/bin/env python3
"""
Generate plots from benchmark results.
"""

import json
import sys
from collections import defaultdict
from pathlib import Path

import matplotlib
matplotlib.use('Agg')  # Non-interactive backend
import matplotlib.pyplot as plt
import numpy as np

# Configuration
PLOTS_DIR = Path("benchmark_results/plots")


def load_results(json_file):
    """Load benchmark results from JSON file."""
    with open(json_file, 'r') as f:
        return json.load(f)


def aggregate_runs(results):
    """
    Aggregate multiple runs of the same benchmark.
    Returns dict: benchmark_name -> {avg_parallel, std_parallel, avg_serial, config, ...}
    """
    by_benchmark = defaultdict(list)

    for r in results:
        if r['success']:  # Only include runs whose tallies matched
            by_benchmark[r['benchmark_name']].append(r)

    aggregated = {}
    for name, runs in by_benchmark.items():
        parallel = [r['parallel_seconds'] for r in runs]
        serial = [r['serial_seconds'] for r in runs]
        speedups = [r['speedup'] for r in runs]

        # Use first run for configuration data
        first = runs[0]

        aggregated[name] = {
            'benchmark_name': name,
            'description': first['description'],
            'chunk_size': first['chunk_size'],
            'num_chunks': first['num_chunks'],
            'max_workers': first['max_workers'],
            'backend': first['backend'],
            'avg_parallel': float(np.mean(parallel)),
            'std_parallel': float(np.std(parallel)),
            'avg_serial': float(np.mean(serial)),
            'std_serial': float(np.std(serial)),
            'avg_speedup': float(np.mean(speedups)),
            'num_runs': len(runs)
        }

    return aggregated


def plot_chunk_size_scaling(aggregated, output_file):
    """Plot parallel and serial runtime vs chunk size."""
    data = [(v['chunk_size'], v['avg_parallel'], v['std_parallel'], v['avg_serial'])
            for k, v in aggregated.items()
            if k.startswith('chunk_size_')]

    if not data:
        print("⚠️  No chunk size scaling data found")
        return False

    data.sort()
    sizes, parallel, stds, serial = zip(*data)

    plt.figure(figsize=(10, 6))
    plt.errorbar(sizes, parallel, yerr=stds, marker='o', capsize=5,
                 linewidth=2, markersize=8, label='Parallel (one thread per chunk)')
    plt.plot(sizes, serial, linestyle='--', linewidth=2, color='gray',
             label='Serial baseline')
    plt.xscale('log')
    plt.xlabel('Tokens per Map Task', fontsize=12)
    plt.ylabel('Runtime (seconds)', fontsize=12)
    plt.title('Word Count Runtime vs Chunk Size', fontsize=14, fontweight='bold')
    plt.legend(fontsize=11)
    plt.grid(True, alpha=0.3)
    plt.tight_layout()
    plt.savefig(output_file, dpi=300, bbox_inches='tight')
    print(f"✓ Saved: {output_file}")
    plt.close()
    return True


def plot_speedup(aggregated, output_file):
    """Plot speedup over the serial baseline vs number of pool workers."""
    series = defaultdict(list)
    for k, v in aggregated.items():
        if v['max_workers'] is not None:
            series[v['backend']].append((v['max_workers'], v['avg_speedup']))

    if not series:
        print("⚠️  Insufficient data for speedup plot")
        return False

    plt.figure(figsize=(10, 6))
    all_workers = set()
    for backend, points in sorted(series.items()):
        points.sort()
        workers, speedups = zip(*points)
        all_workers.update(workers)
        plt.plot(workers, speedups, marker='o', linewidth=2, markersize=8,
                 label=f'{backend} pool')

    ideal = sorted(all_workers)
    plt.plot(ideal, ideal, linestyle='--', linewidth=2,
             label='Ideal (Linear) Speedup', color='gray', alpha=0.7)
    plt.xlabel('Pool Workers', fontsize=12)
    plt.ylabel('Speedup over Serial', fontsize=12)
    plt.title('Parallel Word Count Speedup vs Ideal Linear Speedup',
              fontsize=14, fontweight='bold')
    plt.xticks(ideal)
    plt.legend(fontsize=11)
    plt.grid(True, alpha=0.3)
    plt.tight_layout()
    plt.savefig(output_file, dpi=300, bbox_inches='tight')
    print(f"✓ Saved: {output_file}")
    plt.close()
    return True


def generate_summary_table(aggregated, output_file):
    """Generate a markdown table summarizing all results."""
    lines = [
        "# Benchmark Results Summary\n",
        "| Benchmark | Backend | Chunk | Workers | Parallel (s) | Std Dev | Serial (s) | Speedup |",
        "|-----------|---------|-------|---------|--------------|---------|------------|---------|"
    ]

    for name in sorted(aggregated.keys()):
        v = aggregated[name]
        workers = v['max_workers'] if v['max_workers'] is not None else '-'
        lines.append(
            f"| {v['benchmark_name']:<20} | {v['backend']:<7} | {v['chunk_size']:>7} | "
            f"{workers:>7} | {v['avg_parallel']:>12.4f} | {v['std_parallel']:>7.4f} | "
            f"{v['avg_serial']:>10.4f} | {v['avg_speedup']:>7.2f} |"
        )

    with open(output_file, 'w') as f:
        f.write('\n'.join(lines))

    print(f"✓ Saved: {output_file}")


def main():
    """Generate all plots from benchmark results."""
    if len(sys.argv) < 2:
        print("Usage: python plot_results.py <results.json>")
        print("\nExample:")
        print("  python plot_results.py benchmark_results/benchmark_results_20250113_120000.json")
        sys.exit(1)

    json_file = sys.argv[1]

    if not Path(json_file).exists():
        print(f"❌ File not found: {json_file}")
        sys.exit(1)

    print(f"Loading results from: {json_file}")
    results = load_results(json_file)
    print(f"✓ Loaded {len(results)} benchmark results")

    aggregated = aggregate_runs(results)
    print(f"✓ Aggregated into {len(aggregated)} unique benchmarks")

    PLOTS_DIR.mkdir(parents=True, exist_ok=True)

    print("\nGenerating plots...")
    plot_chunk_size_scaling(aggregated, PLOTS_DIR / "1_chunk_size_scaling.png")
    plot_speedup(aggregated, PLOTS_DIR / "2_speedup_analysis.png")

    generate_summary_table(aggregated, PLOTS_DIR / "results_table.md")

    print(f"\n{'='*70}")
    print(f"All plots saved to: {PLOTS_DIR}/")
    print(f"{'='*70}")


if __name__ == "__main__":
    main()
