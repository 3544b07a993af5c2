"""
LightFeed - a self-hosted RSS/Atom blender.

Fetches a mix of feeds concurrently, parses them tolerantly and blends the
results into one deduplicated, recency-ordered article stream.
"""

__version__ = "0.1.0"
