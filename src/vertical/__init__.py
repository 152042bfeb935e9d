"""Vertical - personal day-by-day calendar."""
