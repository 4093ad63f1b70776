"""Formatting helpers for job reports."""

from typing import Iterable, List, Tuple

from mapred_wordcount.coordinator.metrics import JobMetrics


def format_duration(seconds: float) -> str:
    """Format duration in seconds to human readable string."""
    if seconds < 60:
        return f"{seconds:.1f}s"
    minutes = int(seconds / 60)
    seconds = seconds % 60
    if minutes < 60:
        return f"{minutes}m {seconds:.1f}s"
    hours = int(minutes / 60)
    minutes = minutes % 60
    return f"{hours}h {minutes}m {seconds:.1f}s"


def format_progress_bar(completed: int, total: int, width: int = 40) -> str:
    """Create a progress bar string."""
    percentage = (completed / total) if total > 0 else 0
    filled = int(width * percentage)
    bar = "█" * filled + "░" * (width - filled)
    return f"[{bar}] {percentage:.1%}"


def format_top_words(counts, limit: int = 10) -> List[str]:
    """Most frequent words, ties broken alphabetically."""
    ranked: Iterable[Tuple[str, int]] = sorted(counts.items(), key=lambda kv: (-kv[1], kv[0]))
    return [f"{word}\t{count}" for word, count in list(ranked)[:limit]]


def format_report(metrics: JobMetrics) -> List[str]:
    """Report lines for a parallel run and its serial baseline."""
    settings = f"numCPU= {metrics.parallelism}  wordsPerMap= {metrics.chunk_size}"
    lines = [
        f"#Words:  {metrics.num_tokens}",
        f"mapred( {settings}  took  {metrics.parallel_micros} micros)",
        f"serial( {settings}  took  {metrics.serial_micros} micros)",
        f"Chunks: {metrics.num_chunks}  Distinct words: {metrics.distinct_words}  "
        f"Backend: {metrics.backend}",
    ]
    if metrics.parallel_seconds > 0:
        lines.append(f"Speedup: {metrics.speedup:.2f}x")
    lines.append("✓ Parallel and serial tallies match" if metrics.results_match
                 else "✗ Parallel and serial tallies differ")
    return lines
