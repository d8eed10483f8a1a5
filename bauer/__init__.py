"""Declarative builders for Python classes, with type-pattern rules for field options."""

__version__ = "0.5.0"

__all__ = ["builder", "options", "pattern", "pushable", "state", "util"]