"""
Test configuration for the loyalty server.
"""
import pytest
from django.core.cache import cache
from rest_framework.test import APIClient


@pytest.fixture(autouse=True)
def clear_balance_cache():
    """Cached balances are keyed by customer id, which the test database reuses"""
    cache.clear()
    yield
    cache.clear()


@pytest.fixture
def user_factory():
    """Factory for creating test users."""
    from tests.factories import UserFactory
    return UserFactory


@pytest.fixture
def customer():
    from tests.factories import UserFactory
    return UserFactory()


@pytest.fixture
def staff_user():
    from tests.factories import StaffUserFactory
    return StaffUserFactory()


@pytest.fixture
def api_client():
    return APIClient()


@pytest.fixture
def customer_client(api_client, customer):
    api_client.force_authenticate(user=customer)
    return api_client


@pytest.fixture
def staff_client(staff_user):
    client = APIClient()
    client.force_authenticate(user=staff_user)
    return client


@pytest.fixture
def loyalty_service():
    from apps.loyalty.services import LoyaltyService
    return LoyaltyService()


@pytest.fixture
def default_tiers():
    """Create the four default loyalty tiers."""
    from tests.factories import LoyaltyTierFactory

    return {
        'bronze': LoyaltyTierFactory(name='Bronze', min_points=0, color='#CD7F32', sort_order=1),
        'silver': LoyaltyTierFactory(name='Silver', min_points=200, color='#C0C0C0', sort_order=2),
        'gold': LoyaltyTierFactory(name='Gold', min_points=500, color='#FFD700', sort_order=3),
        'platinum': LoyaltyTierFactory(name='Platinum', min_points=1000, color='#E5E4E2', sort_order=4),
    }
