"""
Loyalty reporting: ledger statistics for the admin screens.
"""
from datetime import timedelta

from django.contrib.auth import get_user_model
from django.db.models import Count, Q, Sum
from django.utils import timezone

from ..exceptions import ValidationError
from ..models import LedgerEntry, LoyaltyReward


class LoyaltyReportService:
    """Aggregate statistics over a trailing window of days"""

    MAX_DAYS = 365

    @classmethod
    def _window_start(cls, days):
        if isinstance(days, bool) or not isinstance(days, int) or not 1 <= days <= cls.MAX_DAYS:
            raise ValidationError(f"Days must be between 1 and {cls.MAX_DAYS}.", field='days')
        return timezone.now() - timedelta(days=days)

    @classmethod
    def transaction_stats(cls, days=30):
        """Per-kind entry counts and point totals since ``days`` ago"""
        start_date = cls._window_start(days)
        entries = LedgerEntry.objects.filter(created_at__gte=start_date)

        by_kind = {
            kind: {'count': 0, 'points': 0} for kind, _label in LedgerEntry.KIND_CHOICES
        }
        for row in entries.values('kind').annotate(count=Count('id'), points=Sum('points')):
            by_kind[row['kind']] = {'count': row['count'], 'points': row['points'] or 0}

        totals = entries.aggregate(
            issued=Sum('points', filter=Q(points__gt=0)),
            spent=Sum('points', filter=Q(points__lt=0)),
            customers=Count('customer', distinct=True),
        )
        return {
            'period': {
                'days': days,
                'start_date': start_date.isoformat(),
                'end_date': timezone.now().isoformat(),
            },
            'by_kind': by_kind,
            'points_issued': totals['issued'] or 0,
            'points_spent': -(totals['spent'] or 0),
            'active_customers': totals['customers'],
        }

    @classmethod
    def top_customers(cls, days=30, limit=10):
        """Customers who earned the most points since ``days`` ago"""
        start_date = cls._window_start(days)
        rows = (
            LedgerEntry.objects.filter(
                created_at__gte=start_date,
                kind__in=LedgerEntry.LIFETIME_KINDS,
                points__gt=0,
            )
            .values('customer_id')
            .annotate(points_earned=Sum('points'), entries=Count('id'))
            .order_by('-points_earned', 'customer_id')[:limit]
        )
        rows = list(rows)
        usernames = dict(
            get_user_model().objects.filter(pk__in=[row['customer_id'] for row in rows])
            .values_list('pk', 'username')
        )
        return [
            {
                'customer_id': row['customer_id'],
                'username': usernames.get(row['customer_id']),
                'points_earned': row['points_earned'],
                'entries': row['entries'],
            }
            for row in rows
        ]

    @classmethod
    def reward_stats(cls):
        """Catalog size and redemption totals per reward"""
        now = timezone.now()
        rewards = LoyaltyReward.objects.all()

        by_reward = {}
        redemptions = (
            LedgerEntry.objects.filter(kind=LedgerEntry.KIND_REDEEMED, metadata__has_key='reward_id')
            .values_list('metadata', 'points')
        )
        for metadata, points in redemptions:
            row = by_reward.setdefault(metadata['reward_id'], {
                'reward_id': metadata['reward_id'],
                'name': metadata.get('reward_name'),
                'redemptions': 0,
                'points_redeemed': 0,
            })
            row['redemptions'] += 1
            row['points_redeemed'] -= points

        return {
            'total_rewards': rewards.count(),
            'active_rewards': rewards.filter(is_active=True).count(),
            'available_rewards': rewards.available(now).count(),
            'redemptions': sum(row['redemptions'] for row in by_reward.values()),
            'points_redeemed': sum(row['points_redeemed'] for row in by_reward.values()),
            'by_reward': sorted(by_reward.values(), key=lambda row: (-row['redemptions'], row['reward_id'])),
        }
