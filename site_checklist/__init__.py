"""Inspection checklist spreadsheets: decode, score rollups and re-encode."""

__version__ = "0.3.0"
