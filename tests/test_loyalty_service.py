"""
Unit tests for the loyalty service entry points
"""
from datetime import timedelta

from django.test import TestCase, override_settings
from django.utils import timezone

from apps.common.models import AdminAuditLog
from apps.loyalty.exceptions import InsufficientPointsError, ValidationError
from apps.loyalty.models import LedgerEntry, LoyaltyAccount, PointsLot
from apps.loyalty.services import LedgerStore, LoyaltyService
from tests.factories import StaffUserFactory, UserFactory


class EarnTest(TestCase):

    def setUp(self):
        self.customer = UserFactory()
        self.service = LoyaltyService()

    def test_earn_without_default_expiry_never_expires(self):
        entry = self.service.earn(self.customer.id, 100, 'Order completed', order_id='ORD-7')

        self.assertEqual(entry.kind, LedgerEntry.KIND_EARNED)
        self.assertEqual(entry.order_id, 'ORD-7')
        self.assertIsNone(entry.expires_at)

    @override_settings(LOYALTY={'DEFAULT_EXPIRY_DAYS': 365})
    def test_earn_applies_default_expiry(self):
        entry = self.service.earn(self.customer.id, 100, 'Order completed')

        self.assertEqual(entry.expires_at, entry.created_at + timedelta(days=365))
        self.assertEqual(entry.lot.expires_at, entry.expires_at)

    def test_earn_rejects_past_expiry(self):
        with self.assertRaises(ValidationError):
            self.service.earn(self.customer.id, 100, 'Order', expires_at=timezone.now() - timedelta(days=1))

    def test_earn_rejects_non_positive_points(self):
        for points in (0, -10):
            with self.subTest(points=points):
                with self.assertRaises(ValidationError):
                    self.service.earn(self.customer.id, points, 'Order')

    def test_earn_accepts_large_amounts(self):
        self.service.earn(self.customer.id, 10 ** 9, 'Enterprise order')

        self.assertEqual(self.service.get_balance(self.customer.id).current_points, 10 ** 9)

    def test_earn_rejects_points_outside_column_range(self):
        with self.assertRaises(ValidationError) as ctx:
            self.service.earn(self.customer.id, 2 ** 31, 'Enterprise order')

        self.assertEqual(ctx.exception.context['field'], 'points')
        self.assertFalse(LedgerEntry.objects.filter(customer=self.customer).exists())


class AdjustTest(TestCase):

    def setUp(self):
        self.customer = UserFactory()
        self.staff = StaffUserFactory()
        self.service = LoyaltyService()
        self.service.earn(self.customer.id, 100, 'Order')

    def test_positive_adjustment(self):
        entry = self.service.adjust(self.customer.id, 25, 'Goodwill', actor=self.staff)

        self.assertEqual(entry.kind, LedgerEntry.KIND_ADJUSTED)
        self.assertEqual(entry.metadata, {'override': False, 'actor_id': self.staff.id})
        balance = self.service.get_balance(self.customer.id)
        self.assertEqual((balance.current_points, balance.lifetime_points), (125, 125))

        log = AdminAuditLog.objects.get()
        self.assertEqual(log.action, AdminAuditLog.ACTION_ADJUST)
        self.assertEqual(log.user, self.staff)
        self.assertEqual(log.object_id, str(entry.id))

    def test_negative_adjustment_within_balance(self):
        self.service.adjust(self.customer.id, -40, 'Correction')

        balance = self.service.get_balance(self.customer.id)
        self.assertEqual((balance.current_points, balance.lifetime_points), (60, 100))
        self.assertFalse(AdminAuditLog.objects.exists())

    def test_negative_adjustment_over_balance_is_refused(self):
        with self.assertRaises(InsufficientPointsError):
            self.service.adjust(self.customer.id, -150, 'Correction', actor=self.staff)

        self.assertEqual(LoyaltyAccount.objects.get(customer=self.customer).current_points, 100)
        self.assertFalse(AdminAuditLog.objects.exists())

    def test_zero_adjustment_is_refused(self):
        with self.assertRaises(ValidationError):
            self.service.adjust(self.customer.id, 0, 'Nothing')

    def test_override_requires_staff_actor(self):
        with self.assertRaises(ValidationError):
            self.service.adjust(self.customer.id, -150, 'Fraud', override=True)
        with self.assertRaises(ValidationError):
            self.service.adjust(self.customer.id, -150, 'Fraud', override=True, actor=UserFactory())

    def test_override_takes_balance_negative_and_is_audited(self):
        entry = self.service.adjust(self.customer.id, -150, 'Fraud reversal', override=True, actor=self.staff)

        self.assertEqual(entry.balance_after, -50)
        self.assertTrue(entry.metadata['override'])
        self.assertEqual(AdminAuditLog.objects.get().action, AdminAuditLog.ACTION_OVERRIDE)

        with self.assertRaises(InsufficientPointsError) as ctx:
            self.service.redeem(self.customer.id, 1, 'Discount')
        self.assertEqual(ctx.exception.available, 0)

        self.service.earn(self.customer.id, 80, 'Order')
        self.assertEqual(self.service.get_balance(self.customer.id).current_points, 30)
        self.assertEqual(PointsLot.objects.for_customer(self.customer.id).open().total_remaining(), 30)

    def test_lapsed_points_do_not_cover_a_deduction(self):
        LedgerStore().append(LedgerEntry(
            customer_id=self.customer.id,
            kind=LedgerEntry.KIND_EARNED,
            points=50,
            description='Old promotion',
            expires_at=timezone.now() - timedelta(days=1),
        ))
        self.assertEqual(LoyaltyAccount.objects.get(customer=self.customer).current_points, 150)

        with self.assertRaises(InsufficientPointsError) as ctx:
            self.service.adjust(self.customer.id, -120, 'Correction')
        self.assertEqual(ctx.exception.available, 100)

        self.service.adjust(self.customer.id, -100, 'Correction')

        self.assertTrue(LedgerEntry.objects.filter(
            customer=self.customer, kind=LedgerEntry.KIND_EXPIRED, points=-50
        ).exists())
        self.assertEqual(self.service.get_balance(self.customer.id).current_points, 0)
        self.assertEqual(PointsLot.objects.for_customer(self.customer.id).open().total_remaining(), 0)


class HistoryAndSummaryTest(TestCase):

    def setUp(self):
        self.customer = UserFactory()
        self.service = LoyaltyService()

    def test_history_limit_is_capped(self):
        self.service.earn(self.customer.id, 10, 'Order')

        page = self.service.list_history(self.customer.id, limit=1000)
        self.assertEqual(page.limit, 100)

    @override_settings(LOYALTY={'HISTORY_PAGE_SIZE': 2})
    def test_history_default_page_size(self):
        for i in range(3):
            self.service.earn(self.customer.id, 10, f'Order {i}')

        page = self.service.list_history(self.customer.id)
        self.assertEqual(len(page.entries), 2)
        self.assertTrue(page.has_next)

    def test_summary_reports_points_expiring_soon(self):
        now = timezone.now()
        self.service.earn(self.customer.id, 40, 'Soon', expires_at=now + timedelta(days=10))
        self.service.earn(self.customer.id, 60, 'Later', expires_at=now + timedelta(days=90))
        self.service.earn(self.customer.id, 5, 'Never')

        summary = self.service.get_summary(self.customer.id)

        self.assertEqual(summary['balance'].current_points, 105)
        self.assertEqual(summary['expiring_soon'], 40)
        self.assertEqual(summary['expiring_soon_days'], 30)
        self.assertEqual(len(summary['recent_entries']), 3)

    def test_list_order_entries(self):
        self.service.earn(self.customer.id, 10, 'Order', order_id='A-1')
        self.service.redeem(self.customer.id, 5, 'Discount', order_id='A-1')

        entries = self.service.list_order_entries('A-1')
        self.assertEqual([entry.kind for entry in entries], [LedgerEntry.KIND_EARNED, LedgerEntry.KIND_REDEEMED])
