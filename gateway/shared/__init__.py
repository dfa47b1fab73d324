"""Shared utilities (telemetry, logging)."""
