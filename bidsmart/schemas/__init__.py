"""Pydantic request, response and payload schemas."""
