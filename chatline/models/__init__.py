"""Pydantic models (schemas) for the application."""
