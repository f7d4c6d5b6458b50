"""API route modules."""
from flowfix.api import normalize

__all__ = ["normalize"]
