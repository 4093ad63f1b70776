"""
Parallel word-frequency counting with a fan-out/fan-in map-reduce pipeline.
"""

__version__ = "0.1.0"
