"""Metric computation subpackage."""

from .stream_metrics import site_table, sample_table  # noqa: F401

__all__ = ["site_table", "sample_table"]
