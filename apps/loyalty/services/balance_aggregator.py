"""
Balance aggregator: derives a customer's loyalty balance from the ledger.
"""
from dataclasses import dataclass, asdict
from typing import Optional
from uuid import uuid4

from django.core.cache import cache

from ..conf import loyalty_setting
from ..models import LoyaltyAccount
from .ledger_store import LedgerStore
from .tier_policy import TierPolicy


def balance_cache_key(customer_id):
    return f"{loyalty_setting('BALANCE_CACHE_PREFIX')}:{customer_id}"


def balance_generation_key(customer_id):
    return f"{loyalty_setting('BALANCE_CACHE_PREFIX')}:gen:{customer_id}"


def invalidate_balance(customer_id):
    """Drop a customer's cached balance and start a new cache generation"""
    cache.set(balance_generation_key(customer_id), uuid4().hex, timeout=None)
    cache.delete(balance_cache_key(customer_id))


@dataclass(frozen=True)
class CustomerLoyaltyBalance:
    """Derived balance of one customer"""
    customer_id: int
    current_points: int
    lifetime_points: int
    tier: str
    next_tier: Optional[str]
    points_to_next_tier: Optional[int]

    def as_dict(self):
        return asdict(self)


class BalanceAggregator:
    """
    Computes ``CustomerLoyaltyBalance`` values.

    The ``(current_points, lifetime_points)`` pair is cached per customer
    without a timeout; ``invalidate`` drops it and bumps the customer's cache
    generation whenever the ledger store appends an entry for that customer.
    The tier is derived on every read so tier configuration changes apply
    immediately.
    """

    def __init__(self, store=None, policy=None):
        self.store = store or LedgerStore()
        self._policy = policy

    @property
    def policy(self):
        return self._policy or TierPolicy.load()

    def get_balance(self, customer_id):
        current_points, lifetime_points = self.get_totals(customer_id)
        status = self.policy.describe(lifetime_points)
        return CustomerLoyaltyBalance(
            customer_id=customer_id,
            current_points=current_points,
            lifetime_points=lifetime_points,
            tier=status.tier,
            next_tier=status.next_tier,
            points_to_next_tier=status.points_to_next_tier,
        )

    def get_totals(self, customer_id):
        """
        Cached ``(current_points, lifetime_points)`` of a customer.

        Cached totals are tagged with the generation that was current before
        they were loaded. An invalidation that lands while a fill is loading
        moves the generation on, so the late fill is never served.
        """
        key = balance_cache_key(customer_id)
        generation_key = balance_generation_key(customer_id)

        cached = cache.get_many([generation_key, key])
        generation = cached.get(generation_key)
        if generation is None:
            cache.add(generation_key, uuid4().hex, timeout=None)
            generation = cache.get(generation_key)

        tagged = cached.get(key)
        if tagged is not None and tagged[0] == generation:
            return tuple(tagged[1])

        totals = tuple(self._load_totals(customer_id))
        cache.set(key, (generation, totals), timeout=None)
        return totals

    def invalidate(self, customer_id):
        invalidate_balance(customer_id)

    def _load_totals(self, customer_id):
        totals = (
            LoyaltyAccount.objects.filter(customer_id=customer_id)
            .values_list('current_points', 'lifetime_points')
            .first()
        )
        if totals is None:
            return self.store.replay(customer_id)
        return totals
