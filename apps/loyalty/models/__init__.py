"""
Loyalty models module.

All models are exported from this module.
"""
from .ledger_entry import LedgerEntry
from .account import LoyaltyAccount
from .lot import PointsLot
from .tier import LoyaltyTier
from .reward import LoyaltyReward

__all__ = [
    'LedgerEntry',
    'LoyaltyAccount',
    'PointsLot',
    'LoyaltyTier',
    'LoyaltyReward',
]
