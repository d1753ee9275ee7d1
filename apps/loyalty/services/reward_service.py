"""
Reward catalog: exchanging points for catalog rewards.
"""
import logging

from django.db import transaction
from django.db.models import F
from django.utils import timezone

from ..exceptions import RewardNotFoundError, RewardUnavailableError
from ..models import LoyaltyReward
from .balance_aggregator import BalanceAggregator
from .ledger_store import LedgerStore
from .redemption_service import RedemptionService
from .tier_policy import TierPolicy

logger = logging.getLogger(__name__)


class RewardService:
    """
    Redeems catalog rewards through ``RedemptionService``.

    The reward row is locked before the customer's account, and the tier,
    validity window and stock checks run in the same transaction as the
    redeemed entry and the stock decrement.
    """

    def __init__(self, store=None, policy=None, redemptions=None, aggregator=None):
        self.store = store or LedgerStore()
        self._policy = policy
        self.redemptions = redemptions or RedemptionService(self.store)
        self.aggregator = aggregator or BalanceAggregator(self.store, policy)

    @property
    def policy(self):
        return self._policy or TierPolicy.load()

    def available_rewards(self, customer_id, now=None):
        """Rewards the customer's tier may redeem right now"""
        now = now or timezone.now()
        tier = self.aggregator.get_balance(customer_id).tier
        return [
            reward for reward in LoyaltyReward.objects.available(now)
            if reward.allows_tier(tier)
        ]

    def redeem_reward(self, customer_id, reward_id):
        """
        Spend ``points_required`` on a reward.

        Raises:
            RewardNotFoundError: Unknown reward
            RewardUnavailableError: Inactive, outside its window, out of stock or tier restricted
            InsufficientPointsError: The customer cannot afford the reward

        Returns:
            tuple: The ``redeemed`` LedgerEntry and the updated reward
        """
        with transaction.atomic():
            reward = LoyaltyReward.objects.select_for_update().filter(pk=reward_id).first()
            if reward is None:
                raise RewardNotFoundError(reward_id=reward_id)

            reason = reward.unavailable_reason(timezone.now())
            if reason is not None:
                raise RewardUnavailableError(reward_id=reward.pk, reason=reason)

            account = self.store.lock_account(customer_id)
            tier = self.policy.resolve_tier(account.lifetime_points)
            if not reward.allows_tier(tier):
                raise RewardUnavailableError(
                    f"Reward is not available for the {tier} tier",
                    reward_id=reward.pk,
                    reason=LoyaltyReward.UNAVAILABLE_TIER,
                )

            entry = self.redemptions.redeem(
                customer_id,
                reward.points_required,
                f"Redeemed reward: {reward.name}",
                metadata={
                    'reward_id': reward.pk,
                    'reward_name': reward.name,
                    'reward_type': reward.reward_type,
                },
            )

            if reward.is_limited:
                updated = LoyaltyReward.objects.filter(pk=reward.pk, remaining_quantity__gt=0).update(
                    remaining_quantity=F('remaining_quantity') - 1
                )
                if not updated:
                    raise RewardUnavailableError(reward_id=reward.pk, reason=LoyaltyReward.UNAVAILABLE_OUT_OF_STOCK)
                reward.refresh_from_db(fields=['remaining_quantity'])

        logger.info(
            "Customer %s redeemed reward %s for %s points (entry %s)",
            customer_id, reward.pk, reward.points_required, entry.id
        )
        return entry, reward
