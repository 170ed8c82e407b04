"""
Configuration module.

Handles loading of system settings and prohibited keyword lists.
"""

from .loader import ConfigLoader
from .models import (
    GradingSettings,
    IntegrityConfig,
    ScanSettings,
    StorageSettings,
    SubmissionServiceSettings,
)

__all__ = [
    "ConfigLoader",
    "IntegrityConfig",
    "StorageSettings",
    "ScanSettings",
    "SubmissionServiceSettings",
    "GradingSettings",
]
