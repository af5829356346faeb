"""Extraction and aggregation engine."""
