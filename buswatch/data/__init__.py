"""Upstream fetching, extraction and refresh policy."""
