"""Stat Taker API - workflow-driven stat tagging for video breakdowns."""

__version__ = "0.1.0"
