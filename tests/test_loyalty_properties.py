"""
Property-based tests for the loyalty ledger invariants.
"""
from hypothesis import given, strategies as st, settings
from hypothesis.extra.django import TestCase
from django.core.cache import cache

from apps.loyalty.exceptions import InsufficientPointsError
from apps.loyalty.models import LedgerEntry, LoyaltyAccount, PointsLot
from apps.loyalty.services import LedgerStore, LoyaltyService
from tests.factories import UserFactory

operations = st.lists(
    st.one_of(
        st.tuples(st.just('earn'), st.integers(min_value=1, max_value=500)),
        st.tuples(st.just('redeem'), st.integers(min_value=1, max_value=600)),
        st.tuples(st.just('adjust'), st.integers(min_value=-300, max_value=300).filter(bool)),
    ),
    min_size=1,
    max_size=15,
)


class LedgerInvariantProperties(TestCase):
    """Property tests for balance consistency"""

    def apply(self, service, customer_id, operation):
        kind, points = operation
        try:
            if kind == 'earn':
                service.earn(customer_id, points, 'Order')
            elif kind == 'redeem':
                service.redeem(customer_id, points, 'Discount')
            else:
                service.adjust(customer_id, points, 'Correction')
        except InsufficientPointsError:
            pass

    @given(ops=operations)
    @settings(max_examples=40, deadline=None)
    def test_counters_match_ledger_replay(self, ops):
        """
        Current points always equal the replayed sum of all entries and never
        go negative; lifetime points never decrease; open lots hold exactly the
        current balance.
        """
        cache.clear()
        customer = UserFactory()
        service = LoyaltyService()
        store = LedgerStore()
        previous_lifetime = 0

        for operation in ops:
            self.apply(service, customer.id, operation)

            account = LoyaltyAccount.objects.get(customer=customer)
            self.assertEqual(store.replay(customer.id), (account.current_points, account.lifetime_points))
            self.assertGreaterEqual(account.current_points, 0)
            self.assertGreaterEqual(account.lifetime_points, previous_lifetime)
            self.assertEqual(
                PointsLot.objects.for_customer(customer.id).open().total_remaining(),
                account.current_points,
            )
            previous_lifetime = account.lifetime_points

            balance = service.get_balance(customer.id)
            self.assertEqual(balance.current_points, account.current_points)

    @given(earned=st.integers(min_value=1, max_value=10000))
    @settings(max_examples=30, deadline=None)
    def test_redeeming_full_balance(self, earned):
        """Redeeming exactly the balance leaves zero, one more point is refused"""
        cache.clear()
        customer = UserFactory()
        service = LoyaltyService()
        service.earn(customer.id, earned, 'Order')

        with self.assertRaises(InsufficientPointsError):
            service.redeem(customer.id, earned + 1, 'Discount')
        self.assertEqual(LedgerEntry.objects.filter(customer=customer).count(), 1)

        service.redeem(customer.id, earned, 'Discount')
        balance = service.get_balance(customer.id)
        self.assertEqual(balance.current_points, 0)
        self.assertEqual(balance.lifetime_points, earned)
