from decimal import Decimal

from rest_framework import serializers

from ..models import LoyaltyReward
from ..validators import MAX_POINTS


class LoyaltyRewardSerializer(serializers.ModelSerializer):
    """Serializer for the customer-facing reward catalog"""

    class Meta:
        model = LoyaltyReward
        fields = [
            'id', 'name', 'description', 'reward_type', 'points_required', 'value',
            'discount_type', 'image_url', 'terms_conditions', 'tier_restrictions',
            'is_limited', 'remaining_quantity', 'starts_at', 'ends_at',
        ]
        read_only_fields = fields


class AdminLoyaltyRewardSerializer(serializers.ModelSerializer):
    """
    Serializer for reward catalog management.
    Used for: /api/loyalty/admin/rewards/
    """
    points_required = serializers.IntegerField(min_value=1, max_value=MAX_POINTS)
    tier_restrictions = serializers.ListField(
        child=serializers.CharField(max_length=100), required=False
    )

    class Meta:
        model = LoyaltyReward
        fields = [
            'id', 'name', 'description', 'reward_type', 'points_required', 'value',
            'discount_type', 'conditions', 'is_active', 'is_limited', 'total_quantity',
            'remaining_quantity', 'starts_at', 'ends_at', 'image_url', 'terms_conditions',
            'tier_restrictions', 'auto_apply', 'sort_order', 'created_at', 'updated_at',
        ]
        read_only_fields = ['id', 'created_at', 'updated_at']

    def _current(self, attrs, name):
        if name in attrs:
            return attrs[name]
        return getattr(self.instance, name, None)

    def validate(self, attrs):
        starts_at = self._current(attrs, 'starts_at')
        ends_at = self._current(attrs, 'ends_at')
        if starts_at and ends_at and ends_at <= starts_at:
            raise serializers.ValidationError({'ends_at': 'End date must be after the start date.'})

        value = self._current(attrs, 'value')
        if (self._current(attrs, 'discount_type') == LoyaltyReward.DISCOUNT_PERCENTAGE
                and value is not None and value > Decimal('100')):
            raise serializers.ValidationError({'value': 'A percentage discount cannot exceed 100.'})

        if self._current(attrs, 'is_limited'):
            total = self._current(attrs, 'total_quantity')
            if total is None:
                raise serializers.ValidationError({'total_quantity': 'Limited rewards need a total quantity.'})
            remaining = self._current(attrs, 'remaining_quantity')
            if remaining is None:
                attrs['remaining_quantity'] = remaining = total
            if remaining > total:
                raise serializers.ValidationError(
                    {'remaining_quantity': 'Remaining quantity cannot exceed the total quantity.'}
                )
        return attrs
