"""Shared infrastructure: logging, request context, persistence and base schemas."""
