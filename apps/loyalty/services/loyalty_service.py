"""
Loyalty service: the entry point other apps, views and commands use.
"""
import logging
from datetime import timedelta

from django.db import transaction
from django.utils import timezone

from apps.common.models import AdminAuditLog

from ..conf import loyalty_setting
from ..exceptions import InsufficientPointsError, ValidationError
from ..models import LedgerEntry, PointsLot
from ..validators import validate_description, validate_points
from .balance_aggregator import BalanceAggregator
from .expiry_sweeper import ExpirySweeper
from .ledger_store import LedgerStore
from .redemption_service import RedemptionService
from .reward_service import RewardService

logger = logging.getLogger(__name__)
audit_logger = logging.getLogger('audit')


class LoyaltyService:
    """Service for handling loyalty points operations"""

    def __init__(self, store=None, policy=None):
        self.store = store or LedgerStore()
        self.aggregator = BalanceAggregator(self.store, policy)
        self.sweeper = ExpirySweeper(self.store)
        self.redemptions = RedemptionService(self.store, self.sweeper)
        self.rewards = RewardService(self.store, policy, self.redemptions, self.aggregator)

    def earn(self, customer_id, points, description, order_id=None, expires_at=None):
        """Credit points for a completed order or promotion"""
        points = validate_points(points)
        description = validate_description(description)

        now = timezone.now()
        if expires_at is None:
            expiry_days = loyalty_setting('DEFAULT_EXPIRY_DAYS')
            if expiry_days and expiry_days > 0:
                expires_at = now + timedelta(days=expiry_days)
        elif expires_at <= now:
            raise ValidationError("Expiry date must be in the future.", field='expires_at')

        with transaction.atomic():
            self.store.lock_account(customer_id)
            entry = self.store.append(LedgerEntry(
                customer_id=customer_id,
                kind=LedgerEntry.KIND_EARNED,
                points=points,
                description=description,
                order_id=str(order_id) if order_id else None,
                expires_at=expires_at,
                created_at=now,
            ))

        logger.info("Customer %s earned %s points (order %s)", customer_id, points, order_id)
        return entry

    def adjust(self, customer_id, points, description, override=False, actor=None):
        """
        Record an administrative adjustment.

        Args:
            customer_id: Customer whose balance is adjusted
            points: Signed non-zero delta
            description: Reason shown in the customer's history
            override: Allow a negative delta to take the balance below zero
            actor: Staff user performing the adjustment

        Raises:
            ValidationError: Zero delta, empty description or override without a staff actor
            InsufficientPointsError: Negative delta larger than the balance without override
        """
        points = validate_points(points, allow_negative=True)
        description = validate_description(description)

        if override and not (actor is not None and actor.is_staff):
            raise ValidationError("Only staff members can override the balance check.", field='override')

        metadata = {'override': bool(override)}
        if actor is not None:
            metadata['actor_id'] = actor.pk

        with transaction.atomic():
            self.store.lock_account(customer_id)
            # Lapsed points must not cover a deduction
            self.sweeper.expire_lapsed_lots(customer_id, timezone.now())
            account = self.store.lock_account(customer_id)
            if points < 0 and not override and -points > account.current_points:
                raise InsufficientPointsError(requested=-points, available=max(account.current_points, 0))

            entry = self.store.append(
                LedgerEntry(
                    customer_id=customer_id,
                    kind=LedgerEntry.KIND_ADJUSTED,
                    points=points,
                    description=description,
                    metadata=metadata,
                ),
                allow_negative=override,
            )

            if actor is not None:
                action = AdminAuditLog.ACTION_OVERRIDE if override else AdminAuditLog.ACTION_ADJUST
                AdminAuditLog.record(
                    action,
                    f"Adjusted customer {customer_id} by {points} points: {description}",
                    user=actor,
                    obj=entry,
                )

        audit_logger.info(
            "Loyalty adjustment: customer=%s points=%s override=%s actor=%s balance_after=%s",
            customer_id, points, override, metadata.get('actor_id'), entry.balance_after
        )
        return entry

    def redeem(self, customer_id, points, description, order_id=None):
        return self.redemptions.redeem(customer_id, points, description, order_id=order_id)

    def redeem_reward(self, customer_id, reward_id):
        return self.rewards.redeem_reward(customer_id, reward_id)

    def available_rewards(self, customer_id):
        return self.rewards.available_rewards(customer_id)

    def get_balance(self, customer_id):
        return self.aggregator.get_balance(customer_id)

    def list_history(self, customer_id, page=1, limit=None):
        """One page of the customer's ledger, newest first"""
        limit = limit or loyalty_setting('HISTORY_PAGE_SIZE')
        limit = min(limit, loyalty_setting('HISTORY_MAX_PAGE_SIZE'))
        return self.store.list_by_customer(customer_id, page=page, limit=limit)

    def list_order_entries(self, order_id):
        return self.store.list_by_order(order_id)

    def get_summary(self, customer_id):
        """Balance together with points expiring soon and the latest entries"""
        expiring_days = loyalty_setting('EXPIRING_SOON_DAYS')
        return {
            'balance': self.get_balance(customer_id),
            'expiring_soon': PointsLot.expiring_points(customer_id, expiring_days),
            'expiring_soon_days': expiring_days,
            'recent_entries': self.store.list_by_customer(customer_id, page=1, limit=10).entries,
        }

    def expire_points(self, customer_id=None, now=None):
        """Run the expiry sweep for one customer or for everybody"""
        if customer_id is not None:
            return self.sweeper.sweep_customer(customer_id, now)
        return self.sweeper.sweep(now)

    def rebuild_account(self, customer_id, actor=None):
        account, changed = self.store.rebuild_account(customer_id)
        if changed and actor is not None:
            AdminAuditLog.record(
                AdminAuditLog.ACTION_REBUILD,
                f"Rebuilt loyalty counters of customer {customer_id} from the ledger",
                user=actor,
                obj=account,
            )
        return account, changed
