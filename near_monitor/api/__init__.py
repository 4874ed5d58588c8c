"""
API Package
===========

External API clients for NEAR balances and transaction history.

Components:
- near.py: NearClient (RPC view_account + NearBlocks txns)
"""

from .near import NearClient

__all__ = [
    "NearClient",
]
