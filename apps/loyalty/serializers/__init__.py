"""
Loyalty serializers module.
"""
from .ledger_serializers import (
    LedgerEntrySerializer, AdminLedgerEntrySerializer,
    LedgerPageSerializer, AdminLedgerPageSerializer
)
from .balance_serializers import BalanceSerializer, SummarySerializer
from .tier_serializers import LoyaltyTierSerializer
from .reward_serializers import LoyaltyRewardSerializer, AdminLoyaltyRewardSerializer
from .request_serializers import (
    RedeemSerializer, EarnSerializer, AdjustSerializer,
    HistoryQuerySerializer, StatsQuerySerializer
)

__all__ = [
    'LedgerEntrySerializer',
    'AdminLedgerEntrySerializer',
    'LedgerPageSerializer',
    'AdminLedgerPageSerializer',
    'BalanceSerializer',
    'SummarySerializer',
    'LoyaltyTierSerializer',
    'LoyaltyRewardSerializer',
    'AdminLoyaltyRewardSerializer',
    'RedeemSerializer',
    'EarnSerializer',
    'AdjustSerializer',
    'HistoryQuerySerializer',
    'StatsQuerySerializer',
]
