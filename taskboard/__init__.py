"""Kanban task board service with permission-gated moves and an optimistic board client."""

__version__ = "0.1.0"
