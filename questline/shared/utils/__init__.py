"""Logging and datetime helpers."""
