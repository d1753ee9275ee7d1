"""
Tier policy: maps lifetime points to a loyalty tier.
"""
from bisect import bisect_right
from collections import namedtuple

from django.core.exceptions import ImproperlyConfigured

from ..conf import loyalty_setting

TierThreshold = namedtuple('TierThreshold', ['name', 'min_points'])
TierStatus = namedtuple('TierStatus', ['tier', 'next_tier', 'points_to_next_tier'])


class TierPolicy:
    """
    Pure mapping from lifetime points to a tier.

    Configured with ``(tier_name, min_lifetime_points)`` pairs that must be
    strictly increasing by threshold. Points below the lowest threshold
    (including zero and negative values) clamp to the lowest tier.
    """

    def __init__(self, thresholds):
        tiers = [TierThreshold(str(name), int(min_points)) for name, min_points in thresholds]
        if not tiers:
            raise ImproperlyConfigured("At least one loyalty tier must be configured.")

        for previous, current in zip(tiers, tiers[1:]):
            if current.min_points <= previous.min_points:
                raise ImproperlyConfigured(
                    f"Loyalty tier thresholds must be strictly increasing: "
                    f"{previous.name}={previous.min_points}, {current.name}={current.min_points}"
                )

        self._tiers = tuple(tiers)
        self._floors = [tier.min_points for tier in tiers]

    @property
    def tiers(self):
        return self._tiers

    @property
    def lowest(self):
        return self._tiers[0]

    @property
    def highest(self):
        return self._tiers[-1]

    def resolve_tier(self, lifetime_points):
        """Name of the highest tier whose threshold is <= lifetime_points"""
        index = bisect_right(self._floors, lifetime_points) - 1
        return self._tiers[max(index, 0)].name

    def next_tier(self, lifetime_points):
        """
        Next tier above the resolved one and the points still missing.

        Returns ``(None, None)`` once the top threshold is reached.
        """
        # The resolved tier is at least the lowest one, so the next tier is never below index 1
        index = max(bisect_right(self._floors, lifetime_points), 1)
        if index >= len(self._tiers):
            return None, None
        upcoming = self._tiers[index]
        return upcoming.name, upcoming.min_points - lifetime_points

    def describe(self, lifetime_points):
        next_name, missing = self.next_tier(lifetime_points)
        return TierStatus(self.resolve_tier(lifetime_points), next_name, missing)

    @classmethod
    def from_settings(cls):
        return cls(loyalty_setting('TIERS'))

    @classmethod
    def load(cls):
        """Active tiers from the database, or the LOYALTY['TIERS'] setting when none exist"""
        from ..models import LoyaltyTier

        rows = list(
            LoyaltyTier.objects.filter(is_active=True)
            .order_by('min_points')
            .values_list('name', 'min_points')
        )
        if rows:
            return cls(rows)
        return cls.from_settings()
