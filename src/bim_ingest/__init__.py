"""BIM Ingest.

Normalizes IFC models, tabular exports and model-exchange JSON into one
canonical element model for takeoff and handover analytics.
"""
from __future__ import annotations

__version__ = "0.1.0"

__all__ = ["__version__"]
