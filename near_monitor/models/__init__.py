"""
Shared Data Models
==================

This package contains dataclasses used across the project.
"""

from .entry import MonitorEntry
from .transaction import Transaction

__all__ = [
    "MonitorEntry",
    "Transaction",
]
