"""
Unit tests for the append-only points ledger store
"""
from datetime import timedelta
from unittest import mock

from django.db import DatabaseError
from django.test import TestCase
from django.utils import timezone

from apps.loyalty.exceptions import ConcurrencyConflictError, PersistenceError, ValidationError
from apps.loyalty.models import LedgerEntry, LoyaltyAccount, PointsLot
from apps.loyalty.services import LedgerStore
from tests.factories import UserFactory


class LedgerStoreTestMixin:

    def setUp(self):
        self.store = LedgerStore()
        self.customer = UserFactory()

    def append(self, kind, points, description='Test entry', **kwargs):
        return self.store.append(LedgerEntry(
            customer_id=self.customer.id, kind=kind, points=points, description=description, **kwargs
        ))

    def earn(self, points, **kwargs):
        return self.append(LedgerEntry.KIND_EARNED, points, **kwargs)

    def account(self):
        return LoyaltyAccount.objects.get(customer=self.customer)


class LedgerAppendTest(LedgerStoreTestMixin, TestCase):
    """Test appending entries"""

    def test_account_created_for_new_customer(self):
        account = self.account()
        self.assertEqual(account.current_points, 0)
        self.assertEqual(account.lifetime_points, 0)

    def test_earn_updates_counters_and_creates_lot(self):
        entry = self.earn(100)

        self.assertIsNotNone(entry.id)
        self.assertEqual(entry.balance_after, 100)
        account = self.account()
        self.assertEqual(account.current_points, 100)
        self.assertEqual(account.lifetime_points, 100)
        self.assertEqual(account.version, 1)
        self.assertEqual(entry.lot.remaining_points, 100)

    def test_redeem_never_lowers_lifetime_points(self):
        self.earn(100)
        entry = self.append(LedgerEntry.KIND_REDEEMED, -40)

        self.assertEqual(entry.balance_after, 60)
        account = self.account()
        self.assertEqual(account.current_points, 60)
        self.assertEqual(account.lifetime_points, 100)

    def test_positive_adjustment_counts_towards_lifetime(self):
        self.append(LedgerEntry.KIND_ADJUSTED, 30)
        self.append(LedgerEntry.KIND_ADJUSTED, -10)

        account = self.account()
        self.assertEqual(account.current_points, 20)
        self.assertEqual(account.lifetime_points, 30)

    def test_sign_rules(self):
        invalid = [
            (LedgerEntry.KIND_EARNED, -10),
            (LedgerEntry.KIND_EARNED, 0),
            (LedgerEntry.KIND_REDEEMED, 10),
            (LedgerEntry.KIND_EXPIRED, 10),
            (LedgerEntry.KIND_ADJUSTED, 0),
        ]
        for kind, points in invalid:
            with self.subTest(kind=kind, points=points):
                with self.assertRaises(ValidationError):
                    self.append(kind, points)

        self.assertFalse(LedgerEntry.objects.filter(customer=self.customer).exists())
        self.assertEqual(self.account().current_points, 0)

    def test_unknown_kind_and_non_integer_points(self):
        with self.assertRaises(ValidationError):
            self.append('bonus', 10)
        with self.assertRaises(ValidationError):
            self.append(LedgerEntry.KIND_EARNED, 10.5)
        with self.assertRaises(ValidationError):
            self.append(LedgerEntry.KIND_EARNED, True)

    def test_empty_description_is_rejected(self):
        with self.assertRaises(ValidationError):
            self.earn(10, description='   ')

    def test_only_earned_entries_expire(self):
        with self.assertRaises(ValidationError):
            self.append(LedgerEntry.KIND_ADJUSTED, 10, expires_at=timezone.now() + timedelta(days=1))

    def test_overdraw_is_refused(self):
        self.earn(100)

        with self.assertRaises(ConcurrencyConflictError):
            self.append(LedgerEntry.KIND_REDEEMED, -150)

        self.assertEqual(self.account().current_points, 100)
        self.assertEqual(LedgerEntry.objects.filter(customer=self.customer).count(), 1)

    def test_override_allows_negative_balance(self):
        self.earn(10)
        entry = self.store.append(
            LedgerEntry(customer_id=self.customer.id, kind=LedgerEntry.KIND_ADJUSTED, points=-30, description='Fraud'),
            allow_negative=True,
        )

        self.assertEqual(entry.balance_after, -20)
        self.assertEqual(PointsLot.objects.for_customer(self.customer.id).open().total_remaining(), 0)

    def test_earn_after_deficit_absorbs_it_first(self):
        self.store.append(
            LedgerEntry(customer_id=self.customer.id, kind=LedgerEntry.KIND_ADJUSTED, points=-20, description='Fraud'),
            allow_negative=True,
        )
        entry = self.earn(50)

        self.assertEqual(entry.balance_after, 30)
        self.assertEqual(PointsLot.objects.get(entry=entry).remaining_points, 30)

    def test_database_failure_surfaces_as_persistence_error(self):
        self.earn(100)

        with mock.patch.object(LedgerEntry, 'save', side_effect=DatabaseError('disk full')):
            with self.assertRaises(PersistenceError):
                self.earn(50)

        self.assertEqual(self.account().current_points, 100)


class LedgerImmutabilityTest(LedgerStoreTestMixin, TestCase):
    """Test that stored entries cannot change"""

    def test_saved_entry_cannot_be_saved_again(self):
        entry = self.earn(100)
        entry.points = 1000

        with self.assertRaises(ValidationError):
            entry.save()
        self.assertEqual(LedgerEntry.objects.get(pk=entry.pk).points, 100)

    def test_saved_entry_cannot_be_appended_again(self):
        entry = self.earn(100)

        with self.assertRaises(ValidationError):
            self.store.append(entry)

    def test_entry_cannot_be_deleted(self):
        entry = self.earn(100)

        with self.assertRaises(ValidationError):
            entry.delete()
        self.assertTrue(LedgerEntry.objects.filter(pk=entry.pk).exists())


class LedgerQueryTest(LedgerStoreTestMixin, TestCase):
    """Test ledger retrieval"""

    def test_list_by_customer_pages_newest_first(self):
        entries = [self.earn(10 * (i + 1), description=f'Order {i}') for i in range(5)]

        first = self.store.list_by_customer(self.customer.id, page=1, limit=2)
        self.assertEqual([entry.id for entry in first.entries], [entries[4].id, entries[3].id])
        self.assertEqual(first.total, 5)
        self.assertTrue(first.has_next)

        last = self.store.list_by_customer(self.customer.id, page=3, limit=2)
        self.assertEqual([entry.id for entry in last.entries], [entries[0].id])
        self.assertFalse(last.has_next)

    def test_list_by_customer_only_returns_own_entries(self):
        self.earn(10)
        other = UserFactory()
        self.store.append(LedgerEntry(
            customer_id=other.id, kind=LedgerEntry.KIND_EARNED, points=99, description='Other'
        ))

        page = self.store.list_by_customer(self.customer.id)
        self.assertEqual([entry.points for entry in page.entries], [10])

    def test_list_by_customer_rejects_invalid_paging(self):
        with self.assertRaises(ValidationError):
            self.store.list_by_customer(self.customer.id, page=0)
        with self.assertRaises(ValidationError):
            self.store.list_by_customer(self.customer.id, limit=0)

    def test_list_by_order(self):
        self.earn(100, order_id='ORD-1')
        self.append(LedgerEntry.KIND_REDEEMED, -20, order_id='ORD-1')
        self.earn(5, order_id='ORD-2')

        entries = self.store.list_by_order('ORD-1')
        self.assertEqual([entry.points for entry in entries], [100, -20])

    def test_sum_active_points(self):
        now = timezone.now()
        self.earn(100, expires_at=now + timedelta(days=10))
        self.earn(50)

        self.assertEqual(self.store.sum_active_points(self.customer.id, as_of=now), 150)
        self.assertEqual(self.store.sum_active_points(self.customer.id, as_of=now + timedelta(days=11)), 50)

    def test_sum_active_points_after_redemption(self):
        now = timezone.now()
        self.earn(100, expires_at=now + timedelta(days=10))
        self.earn(50)
        self.append(LedgerEntry.KIND_REDEEMED, -120)

        # The oldest lot is drawn down first
        self.assertEqual(self.store.sum_active_points(self.customer.id, as_of=now), 30)
        self.assertEqual(self.store.sum_active_points(self.customer.id, as_of=now + timedelta(days=11)), 30)


class LedgerReplayTest(LedgerStoreTestMixin, TestCase):
    """Test rebuilding counters from the ledger"""

    def test_replay_matches_counters(self):
        self.earn(100)
        self.append(LedgerEntry.KIND_REDEEMED, -30)
        self.append(LedgerEntry.KIND_ADJUSTED, 15)

        account = self.account()
        self.assertEqual(self.store.replay(self.customer.id), (account.current_points, account.lifetime_points))
        self.assertEqual(self.store.replay(self.customer.id), (85, 115))

    def test_rebuild_account_fixes_drift(self):
        self.earn(100)
        LoyaltyAccount.objects.filter(customer=self.customer).update(current_points=7, lifetime_points=7)

        account, changed = self.store.rebuild_account(self.customer.id)

        self.assertTrue(changed)
        self.assertEqual((account.current_points, account.lifetime_points), (100, 100))
        self.assertEqual(self.account().current_points, 100)

    def test_rebuild_account_without_drift(self):
        self.earn(100)

        _account, changed = self.store.rebuild_account(self.customer.id)
        self.assertFalse(changed)

    def test_missing_account_is_seeded_from_ledger(self):
        self.earn(100)
        LoyaltyAccount.objects.filter(customer=self.customer).delete()

        entry = self.earn(20)

        self.assertEqual(entry.balance_after, 120)
        self.assertEqual(self.account().lifetime_points, 120)
