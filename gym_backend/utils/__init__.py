"""Small filesystem helpers shared across the package."""

__all__ = ["fs"]
