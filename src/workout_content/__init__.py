"""Workout content service - exercise search, enrichment and media proxy."""

import importlib.metadata

try:
    __version__ = importlib.metadata.version("workout-content")
except importlib.metadata.PackageNotFoundError:
    __version__ = "unknown"
