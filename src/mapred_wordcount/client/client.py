#!/usr/bin/env python3
"""
Word Count Client CLI
Reads a text file, runs the parallel map-reduce count and the serial
baseline, and reports timings
"""

import argparse
import logging
import os
import sys

from mapred_wordcount.client.monitoring import format_report, format_top_words
from mapred_wordcount.common.config import (
    BACKENDS,
    METRICS_DIR,
    JobConfig,
    configure_logging,
)
from mapred_wordcount.common.errors import MapReduceError
from mapred_wordcount.common.text import read_tokens
from mapred_wordcount.coordinator.driver import compare, timed_serial

logger = logging.getLogger(__name__)


def count_words(args):
    """Run the parallel job and the serial baseline over one file"""
    try:
        tokens = read_tokens(args.input)
    except FileNotFoundError as e:
        print(f"Error: {e}")
        return 1

    try:
        config = JobConfig.from_env(
            chunk_size=args.chunk_size,
            max_workers=args.max_workers,
            backend=args.backend,
            wait_timeout=args.timeout,
        )
        result, metrics = compare(tokens, config)
    except MapReduceError as e:
        print(f"Error: {e}")
        return 1

    for line in format_report(metrics):
        print(line)

    if args.top:
        print(f"\nTop {args.top} words:")
        for line in format_top_words(result.counts, args.top):
            print(f"  {line}")

    if args.metrics_out:
        metrics_path = args.metrics_out
        if os.path.isdir(metrics_path):
            metrics_path = os.path.join(metrics_path, f"{metrics.job_id}.json")
        metrics.save_to_file(metrics_path)
        print(f"✓ Metrics saved to {metrics_path}")

    return 0 if metrics.results_match else 1


def count_serial_only(args):
    """Run only the single-threaded baseline"""
    try:
        tokens = read_tokens(args.input)
    except FileNotFoundError as e:
        print(f"Error: {e}")
        return 1

    counts, seconds = timed_serial(tokens)
    print(f"#Words:  {len(tokens)}")
    print(f"serial( took  {int(seconds * 1_000_000)} micros)")
    if args.top:
        print(f"\nTop {args.top} words:")
        for line in format_top_words(counts, args.top):
            print(f"  {line}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='mapred-wc',
        description='Parallel map-reduce word count with a serial baseline'
    )
    parser.add_argument('--log-level', default=None,
                        help='Logging level (default: $MAPRED_LOG_LEVEL or INFO)')
    subparsers = parser.add_subparsers(dest='command', help='Commands')

    # Count command
    count_parser = subparsers.add_parser('count', help='Count words in parallel and serially')
    count_parser.add_argument('input', help='Input text file')
    count_parser.add_argument('--chunk-size', type=int, default=None,
                              help='Tokens per map task (default: $MAPRED_CHUNK_SIZE or 200000)')
    count_parser.add_argument('--max-workers', type=int, default=None,
                              help='Bound concurrent map tasks (default: one thread per chunk)')
    count_parser.add_argument('--backend', choices=BACKENDS, default=None,
                              help='Run map tasks in threads or processes')
    count_parser.add_argument('--timeout', type=float, default=None,
                              help='Give up after this many seconds (default: wait forever)')
    count_parser.add_argument('--top', type=int, default=0,
                              help='Print the N most frequent words')
    count_parser.add_argument('--metrics-out', default=None,
                              help=f'Write metrics JSON to this file or directory (e.g. {METRICS_DIR}/)')

    # Serial command
    serial_parser = subparsers.add_parser('serial', help='Count words with a single thread only')
    serial_parser.add_argument('input', help='Input text file')
    serial_parser.add_argument('--top', type=int, default=0,
                               help='Print the N most frequent words')

    return parser


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    configure_logging(args.log_level)

    commands = {
        'count': count_words,
        'serial': count_serial_only,
    }
    return commands[args.command](args)


if __name__ == '__main__':
    sys.exit(main())
