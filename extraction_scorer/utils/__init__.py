"""Shared utilities: structured logging and UTC timestamps."""
