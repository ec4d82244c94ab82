"""Runners de proceso."""
