"""Shared utilities: structured logging and text decomposition."""
