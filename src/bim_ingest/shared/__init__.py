"""Shared module.

Cross-cutting concerns: configuration, logging, result pattern.
"""
from bim_ingest.shared.config import Settings, get_settings

__all__ = [
    "Settings",
    "get_settings",
]
