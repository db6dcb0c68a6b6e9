"""Monitoring - pipeline statistics."""

from .stats import Stats

__all__ = ["Stats"]
