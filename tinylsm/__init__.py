"""Blocks, block metadata, a block cache, configuration, merging iterators, logging setup and Redis-style command handlers for a small LSM-tree store."""

__version__ = "0.1.0"

__all__ = ["block", "blockmeta", "block_cache", "config", "iterator", "logger", "handler"]