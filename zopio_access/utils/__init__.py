"""Shared utilities: request correlation context and UTC time helpers."""
