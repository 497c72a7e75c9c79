"""Shared building blocks: base schemas and utilities."""
