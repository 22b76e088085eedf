"""Admissions cutoff explorer: load a cutoff dataset and query it."""

__version__ = "0.1.0"
