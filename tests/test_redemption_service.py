"""
Unit tests for point redemption
"""
import threading
from datetime import timedelta
from unittest import mock

from django.db import connection
from django.test import TestCase, TransactionTestCase
from django.utils import timezone

from apps.loyalty.exceptions import (
    ConcurrencyConflictError, InsufficientPointsError, ValidationError
)
from apps.loyalty.models import LedgerEntry, LoyaltyAccount
from apps.loyalty.services import LedgerStore, LoyaltyService, RedemptionService
from tests.factories import UserFactory


class RedemptionTest(TestCase):

    def setUp(self):
        self.customer = UserFactory()
        self.service = LoyaltyService()

    def current_points(self):
        return LoyaltyAccount.objects.get(customer=self.customer).current_points

    def test_earn_and_redeem_scenario(self):
        self.service.earn(self.customer.id, 100, 'Order #1')
        balance = self.service.get_balance(self.customer.id)
        self.assertEqual((balance.current_points, balance.tier), (100, 'Bronze'))

        self.service.earn(self.customer.id, 150, 'Order #2')
        balance = self.service.get_balance(self.customer.id)
        self.assertEqual(balance.current_points, 250)
        self.assertEqual(balance.lifetime_points, 250)
        self.assertEqual(balance.tier, 'Silver')
        self.assertEqual((balance.next_tier, balance.points_to_next_tier), ('Gold', 250))

        with self.assertRaises(InsufficientPointsError) as ctx:
            self.service.redeem(self.customer.id, 300, 'Gift card')
        self.assertEqual(ctx.exception.requested, 300)
        self.assertEqual(ctx.exception.available, 250)
        self.assertEqual(self.service.get_balance(self.customer.id).current_points, 250)

        entry = self.service.redeem(self.customer.id, 250, 'Gift card')
        self.assertEqual(entry.kind, LedgerEntry.KIND_REDEEMED)
        self.assertEqual(entry.points, -250)

        balance = self.service.get_balance(self.customer.id)
        self.assertEqual(balance.current_points, 0)
        self.assertEqual(balance.lifetime_points, 250)
        self.assertEqual(balance.tier, 'Silver')

    def test_redeem_exact_balance_leaves_zero(self):
        self.service.earn(self.customer.id, 75, 'Order')

        entry = self.service.redeem(self.customer.id, 75, 'Discount', order_id=42)

        self.assertEqual(entry.balance_after, 0)
        self.assertEqual(entry.order_id, '42')
        self.assertEqual(self.current_points(), 0)

    def test_redeem_one_over_balance_writes_nothing(self):
        self.service.earn(self.customer.id, 75, 'Order')

        with self.assertRaises(InsufficientPointsError):
            self.service.redeem(self.customer.id, 76, 'Discount')

        self.assertEqual(self.current_points(), 75)
        self.assertEqual(LedgerEntry.objects.filter(customer=self.customer).count(), 1)

    def test_invalid_requests(self):
        self.service.earn(self.customer.id, 100, 'Order')

        for points in (0, -5, True, '10', 2.5, None):
            with self.subTest(points=points):
                with self.assertRaises(ValidationError):
                    self.service.redeem(self.customer.id, points, 'Discount')

        with self.assertRaises(ValidationError):
            self.service.redeem(self.customer.id, 10, '  ')

        self.assertEqual(self.current_points(), 100)

    def test_redemptions_consume_oldest_points_first(self):
        first = self.service.earn(self.customer.id, 50, 'Order #1')
        second = self.service.earn(self.customer.id, 50, 'Order #2')

        self.service.redeem(self.customer.id, 70, 'Discount')

        first.lot.refresh_from_db()
        second.lot.refresh_from_db()
        self.assertEqual(first.lot.remaining_points, 0)
        self.assertTrue(first.lot.is_fully_consumed)
        self.assertEqual(second.lot.remaining_points, 30)

    def test_lapsed_points_are_expired_before_redeeming(self):
        store = LedgerStore()
        store.append(LedgerEntry(
            customer_id=self.customer.id,
            kind=LedgerEntry.KIND_EARNED,
            points=100,
            description='Old promotion',
            expires_at=timezone.now() - timedelta(days=1),
        ))
        self.service.earn(self.customer.id, 50, 'Order')

        with self.assertRaises(InsufficientPointsError) as ctx:
            self.service.redeem(self.customer.id, 60, 'Discount')
        self.assertEqual(ctx.exception.available, 50)

        self.service.redeem(self.customer.id, 50, 'Discount')

        kinds = list(
            LedgerEntry.objects.filter(customer=self.customer)
            .order_by('created_at', 'id').values_list('kind', 'points')
        )
        self.assertIn((LedgerEntry.KIND_EXPIRED, -100), kinds)
        self.assertEqual(kinds[-1], (LedgerEntry.KIND_REDEEMED, -50))
        self.assertEqual(self.current_points(), 0)

    def test_sequential_redemptions_against_shared_balance(self):
        self.service.earn(self.customer.id, 100, 'Order')

        self.service.redeem(self.customer.id, 60, 'First')
        with self.assertRaises(InsufficientPointsError):
            self.service.redeem(self.customer.id, 60, 'Second')

        self.assertEqual(self.current_points(), 40)


class RedemptionRetryTest(TestCase):
    """Test the automatic retry after a lost race"""

    def setUp(self):
        self.customer = UserFactory()
        self.store = LedgerStore()
        self.redemptions = RedemptionService(self.store)
        LoyaltyService(self.store).earn(self.customer.id, 100, 'Order')

    def test_conflict_is_retried_once(self):
        real_append = self.store.append
        calls = []

        def conflict_once(entry, allow_negative=False):
            calls.append(entry.points)
            if len(calls) == 1:
                raise ConcurrencyConflictError(customer_id=entry.customer_id)
            return real_append(entry, allow_negative=allow_negative)

        with mock.patch.object(self.store, 'append', side_effect=conflict_once):
            entry = self.redemptions.redeem(self.customer.id, 30, 'Discount')

        self.assertEqual(calls, [-30, -30])
        self.assertEqual(entry.balance_after, 70)
        self.assertEqual(LedgerEntry.objects.filter(kind=LedgerEntry.KIND_REDEEMED).count(), 1)

    def test_second_conflict_propagates(self):
        with mock.patch.object(
            self.store, 'append', side_effect=ConcurrencyConflictError(customer_id=self.customer.id)
        ) as append:
            with self.assertRaises(ConcurrencyConflictError):
                self.redemptions.redeem(self.customer.id, 30, 'Discount')

        self.assertEqual(append.call_count, RedemptionService.MAX_ATTEMPTS)
        self.assertEqual(LoyaltyAccount.objects.get(customer=self.customer).current_points, 100)


class ConcurrentRedemptionTest(TransactionTestCase):
    """Two redemptions racing for the same balance"""

    def test_redemption_started_inside_another_sees_its_debit(self):
        customer = UserFactory()
        LoyaltyService().earn(customer.id, 100, 'Order')

        first = LoyaltyService()
        real_append = first.store.append
        locked = threading.Event()
        proceed = threading.Event()
        results = {}

        def append_after_second_starts(entry, allow_negative=False):
            locked.set()
            proceed.wait(timeout=10)
            return real_append(entry, allow_negative=allow_negative)

        def redeem(name, service):
            try:
                service.redeem(customer.id, 60, f'{name} discount')
                results[name] = 'ok'
            except InsufficientPointsError as exc:
                results[name] = ('insufficient', exc.available)
            finally:
                connection.close()

        with mock.patch.object(first.store, 'append', side_effect=append_after_second_starts):
            first_thread = threading.Thread(target=redeem, args=('first', first))
            first_thread.start()
            self.assertTrue(locked.wait(timeout=10))

            second_thread = threading.Thread(target=redeem, args=('second', LoyaltyService()))
            second_thread.start()
            proceed.set()

            first_thread.join()
            second_thread.join()

        self.assertEqual(results, {'first': 'ok', 'second': ('insufficient', 40)})
        self.assertEqual(LoyaltyAccount.objects.get(customer=customer).current_points, 40)
        self.assertEqual(LedgerEntry.objects.filter(customer=customer, kind=LedgerEntry.KIND_REDEEMED).count(), 1)

    def test_only_one_of_two_overlapping_redemptions_succeeds(self):
        customer = UserFactory()
        LoyaltyService().earn(customer.id, 100, 'Order')

        barrier = threading.Barrier(2)
        results = []

        def redeem():
            barrier.wait()
            try:
                LoyaltyService().redeem(customer.id, 60, 'Concurrent discount')
                results.append('ok')
            except InsufficientPointsError:
                results.append('insufficient')
            finally:
                connection.close()

        threads = [threading.Thread(target=redeem) for _ in range(2)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        self.assertEqual(sorted(results), ['insufficient', 'ok'])
        self.assertEqual(LoyaltyAccount.objects.get(customer=customer).current_points, 40)
