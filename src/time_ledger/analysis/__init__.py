"""Aggregation and reporting over time logs."""
