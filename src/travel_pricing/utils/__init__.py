"""Utility helpers - logging and presentation formatting."""
