"""Pydantic models for API responses and upstream payloads."""
