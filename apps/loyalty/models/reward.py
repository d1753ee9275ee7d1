from django.db import models
from django.db.models import Q


class LoyaltyRewardQuerySet(models.QuerySet):

    def available(self, now):
        """Active rewards inside their validity window with stock left"""
        return self.filter(
            Q(starts_at__isnull=True) | Q(starts_at__lte=now),
            Q(ends_at__isnull=True) | Q(ends_at__gt=now),
            Q(is_limited=False) | Q(remaining_quantity__gt=0),
            is_active=True,
        )


class LoyaltyReward(models.Model):
    """Catalog item customers exchange points for"""
    TYPE_DISCOUNT = 'discount'
    TYPE_FREE_SHIPPING = 'free_shipping'
    TYPE_FREE_PRODUCT = 'free_product'
    TYPE_CASHBACK = 'cashback'
    TYPE_GIFT_CARD = 'gift_card'
    TYPE_EXCLUSIVE_ACCESS = 'exclusive_access'

    TYPE_CHOICES = [
        (TYPE_DISCOUNT, 'Discount'),
        (TYPE_FREE_SHIPPING, 'Free Shipping'),
        (TYPE_FREE_PRODUCT, 'Free Product'),
        (TYPE_CASHBACK, 'Cashback'),
        (TYPE_GIFT_CARD, 'Gift Card'),
        (TYPE_EXCLUSIVE_ACCESS, 'Exclusive Access'),
    ]

    DISCOUNT_PERCENTAGE = 'percentage'
    DISCOUNT_FIXED = 'fixed'

    DISCOUNT_TYPE_CHOICES = [
        (DISCOUNT_PERCENTAGE, 'Percentage'),
        (DISCOUNT_FIXED, 'Fixed Amount'),
    ]

    # Reasons a reward cannot be redeemed right now
    UNAVAILABLE_INACTIVE = 'inactive'
    UNAVAILABLE_NOT_STARTED = 'not_started'
    UNAVAILABLE_ENDED = 'ended'
    UNAVAILABLE_OUT_OF_STOCK = 'out_of_stock'
    UNAVAILABLE_TIER = 'tier_restricted'

    name = models.CharField(max_length=255)
    description = models.TextField(blank=True)
    reward_type = models.CharField(max_length=20, choices=TYPE_CHOICES)
    points_required = models.PositiveIntegerField()
    value = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)
    discount_type = models.CharField(max_length=10, choices=DISCOUNT_TYPE_CHOICES, null=True, blank=True)
    conditions = models.JSONField(default=dict, blank=True)
    is_active = models.BooleanField(default=True)
    is_limited = models.BooleanField(default=False)
    total_quantity = models.PositiveIntegerField(null=True, blank=True)
    remaining_quantity = models.PositiveIntegerField(null=True, blank=True)
    starts_at = models.DateTimeField(null=True, blank=True)
    ends_at = models.DateTimeField(null=True, blank=True)
    image_url = models.URLField(max_length=500, blank=True)
    terms_conditions = models.TextField(blank=True)
    tier_restrictions = models.JSONField(default=list, blank=True)  # Tier names, empty means every tier
    auto_apply = models.BooleanField(default=False)
    sort_order = models.IntegerField(default=0)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = LoyaltyRewardQuerySet.as_manager()

    class Meta:
        db_table = 'loyalty_rewards'
        ordering = ['sort_order', 'points_required', 'id']
        indexes = [
            models.Index(fields=['is_active', 'starts_at', 'ends_at'], name='loyalty_reward_window_idx'),
        ]
        verbose_name = 'Loyalty Reward'
        verbose_name_plural = 'Loyalty Rewards'

    def __str__(self):
        return f"{self.name} ({self.points_required} points)"

    def unavailable_reason(self, now):
        """Why the reward cannot be redeemed at ``now``, or None"""
        if not self.is_active:
            return self.UNAVAILABLE_INACTIVE
        if self.starts_at is not None and self.starts_at > now:
            return self.UNAVAILABLE_NOT_STARTED
        if self.ends_at is not None and self.ends_at <= now:
            return self.UNAVAILABLE_ENDED
        if self.is_limited and not self.remaining_quantity:
            return self.UNAVAILABLE_OUT_OF_STOCK
        return None

    def allows_tier(self, tier):
        if not self.tier_restrictions:
            return True
        return tier.lower() in {name.lower() for name in self.tier_restrictions}
