"""Alarm timer scheduling with batching, wakeup handling and per-uid proxying."""

__version__ = "0.1.0"