"""Matplotlib helpers for SIRD series."""
