"""
Access to the LOYALTY settings block with defaults.
"""
from django.conf import settings

DEFAULTS = {
    'TIERS': [
        ('Bronze', 0),
        ('Silver', 200),
        ('Gold', 500),
        ('Platinum', 1000),
    ],
    'BALANCE_CACHE_PREFIX': 'loyalty:balance',
    'DEFAULT_EXPIRY_DAYS': 0,
    'EXPIRING_SOON_DAYS': 30,
    'HISTORY_PAGE_SIZE': 20,
    'HISTORY_MAX_PAGE_SIZE': 100,
}


def loyalty_setting(name):
    """Return a LOYALTY setting, falling back to the built-in default."""
    return getattr(settings, 'LOYALTY', {}).get(name, DEFAULTS[name])
