"""
Loyalty views module.
"""
from .account_views import (
    get_balance, get_summary, get_history, redeem_points, list_tiers, list_rewards, redeem_reward
)
from .admin_views import adjust_points, customer_balance, customer_history, order_entries, loyalty_stats
from .internal_views import internal_earn_points
from .reward_views import AdminLoyaltyRewardViewSet

__all__ = [
    'get_balance',
    'get_summary',
    'get_history',
    'redeem_points',
    'list_tiers',
    'list_rewards',
    'redeem_reward',
    'adjust_points',
    'customer_balance',
    'customer_history',
    'order_entries',
    'loyalty_stats',
    'internal_earn_points',
    'AdminLoyaltyRewardViewSet',
]
