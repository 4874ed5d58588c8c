"""
Transaction Models
==================

Dataclasses for transaction data from the NearBlocks API.
"""

from dataclasses import dataclass


@dataclass
class Transaction:
    """Transaction from NearBlocks /account/{id}/txns."""
    hash: str
    signer_id: str
    receiver_id: str
    block_timestamp: str  # Nanoseconds since epoch, as a string
    deposit: int          # yoctoNEAR

    @classmethod
    def from_api(cls, data: dict) -> "Transaction":
        """
        Parse a NearBlocks transaction record.

        Raises:
            KeyError, TypeError, ValueError: if required fields are missing
        """
        actions_agg = data.get("actions_agg") or {}
        deposit = actions_agg.get("deposit", 0) or 0

        return cls(
            hash=data["transaction_hash"],
            signer_id=data["predecessor_account_id"],
            receiver_id=data["receiver_account_id"],
            block_timestamp=str(data["block_timestamp"]),
            deposit=int(deposit),
        )
