from .tier_policy import TierPolicy, TierStatus, TierThreshold
from .ledger_store import LedgerPage, LedgerStore
from .balance_aggregator import BalanceAggregator, CustomerLoyaltyBalance, invalidate_balance
from .redemption_service import RedemptionService
from .expiry_sweeper import ExpirySweeper, SweepResult
from .loyalty_service import LoyaltyService
from .reward_service import RewardService
from .report_service import LoyaltyReportService

__all__ = [
    'TierPolicy',
    'TierStatus',
    'TierThreshold',
    'LedgerPage',
    'LedgerStore',
    'BalanceAggregator',
    'CustomerLoyaltyBalance',
    'invalidate_balance',
    'RedemptionService',
    'ExpirySweeper',
    'SweepResult',
    'LoyaltyService',
    'RewardService',
    'LoyaltyReportService',
]
