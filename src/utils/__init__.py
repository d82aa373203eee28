"""Shared helpers: paths, logging and console."""
