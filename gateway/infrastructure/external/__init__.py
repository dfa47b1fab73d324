"""Adapters for outbound HTTP services (GitHub, upload storage)."""
