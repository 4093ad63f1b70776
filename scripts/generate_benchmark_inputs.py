#!/usr/bin/env python3
"""
Generate benchmark input files by replicating story.txt to different sizes.
"""

import argparse
from pathlib import Path

from mapred_wordcount.common.text import tokenize_line

# Configuration
SHARED_DIR = Path("shared")
SAMPLES_DIR = SHARED_DIR / "samples"
INPUT_DIR = SHARED_DIR / "input"
SOURCE_FILE = SAMPLES_DIR / "story.txt"

# Target sizes (approximate)
TARGETS = [
    ("story_medium.txt", 1 * 1024 * 1024),     # ~1MB
    ("story_large.txt", 10 * 1024 * 1024),     # ~10MB
    ("story_xlarge.txt", 50 * 1024 * 1024),    # ~50MB
]


def generate_file(output_path: Path, target_size: int, source_content: bytes) -> int:
    """
    Generate a file by replicating whole copies of source content until
    target size is reached. Only whole copies are written so no word is
    cut in half at the end of the file.

    Args:
        output_path: Path where the output file should be written
        target_size: Target file size in bytes
        source_content: The content to replicate

    Returns:
        Number of replications written
    """
    print(f"Generating {output_path.name} (target: {target_size / (1024*1024):.1f} MB)...")

    if not source_content:
        raise ValueError("Source file is empty!")

    replications = max(1, target_size // len(source_content))

    with open(output_path, 'wb') as f:
        for _ in range(replications):
            f.write(source_content)

    actual_size = output_path.stat().st_size
    print(f"  ✓ Created: {output_path.name} ({actual_size / (1024*1024):.2f} MB, {replications} replications)")
    return replications


def main():
    """Generate all benchmark input files."""
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--source", default=str(SOURCE_FILE), help="Text to replicate")
    parser.add_argument("--output-dir", default=str(INPUT_DIR))
    args = parser.parse_args()

    source_file = Path(args.source)
    input_dir = Path(args.output_dir)

    print("=" * 70)
    print("Generating Benchmark Input Files")
    print("=" * 70)

    input_dir.mkdir(parents=True, exist_ok=True)

    if not source_file.exists():
        print(f"❌ Source file not found: {source_file}")
        return 1

    source_content = source_file.read_bytes()
    source_tokens = sum(
        len(tokenize_line(line))
        for line in source_content.decode('utf-8', errors='ignore').splitlines()
    )
    print(f"\n📄 Source file: {source_file} ({len(source_content)} bytes, {source_tokens} tokens)")

    print(f"\n📝 Generating files in {input_dir}...")
    for filename, target_size in TARGETS:
        output_path = input_dir / filename

        # Skip if file already exists and is approximately the right size
        if output_path.exists():
            existing_size = output_path.stat().st_size
            if abs(existing_size - target_size) < target_size * 0.1:  # Within 10%
                print(f"  ⏭️  Skipping {filename} (already exists, size: {existing_size / (1024*1024):.2f} MB)")
                continue

        replications = generate_file(output_path, target_size, source_content)
        print(f"     ~{replications * source_tokens} tokens")

    print("\n" + "=" * 70)
    print("✓ Generation complete!")
    print("=" * 70)
    return 0


if __name__ == "__main__":
    exit(main())
