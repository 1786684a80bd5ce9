"""Headless command-line entry point for mystream-indexer."""
