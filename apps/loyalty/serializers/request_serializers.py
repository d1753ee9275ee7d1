"""
Request serializers that validate loyalty commands and query parameters.
"""
from rest_framework import serializers

from ..conf import loyalty_setting
from ..validators import MAX_POINTS


class RedeemSerializer(serializers.Serializer):
    """
    Serializer for points redemption requests.
    Used for: POST /api/loyalty/redeem/
    """
    points = serializers.IntegerField(min_value=1, max_value=MAX_POINTS, help_text="Points to redeem")
    description = serializers.CharField(max_length=255, help_text="Reason shown in the history")
    order_id = serializers.CharField(max_length=100, required=False, allow_null=True, allow_blank=True)


class EarnSerializer(serializers.Serializer):
    """
    Serializer for order-completion credits.
    Used for: POST /api/loyalty/internal/earn/
    """
    customer_id = serializers.IntegerField(min_value=1)
    points = serializers.IntegerField(min_value=1, max_value=MAX_POINTS)
    description = serializers.CharField(max_length=255)
    order_id = serializers.CharField(max_length=100, required=False, allow_null=True, allow_blank=True)
    expires_at = serializers.DateTimeField(required=False, allow_null=True)


class AdjustSerializer(serializers.Serializer):
    """
    Serializer for administrative adjustments.
    Used for: POST /api/loyalty/admin/adjust/
    """
    customer_id = serializers.IntegerField(min_value=1)
    points = serializers.IntegerField(
        min_value=-MAX_POINTS, max_value=MAX_POINTS, help_text="Signed, non-zero points delta"
    )
    description = serializers.CharField(max_length=255)
    override = serializers.BooleanField(default=False)

    def validate_points(self, value):
        if value == 0:
            raise serializers.ValidationError("Points adjustment cannot be zero.")
        return value


class HistoryQuerySerializer(serializers.Serializer):
    """Query parameters of the history endpoints"""
    page = serializers.IntegerField(min_value=1, default=1)
    limit = serializers.IntegerField(min_value=1, required=False)

    def validate_limit(self, value):
        return min(value, loyalty_setting('HISTORY_MAX_PAGE_SIZE'))


class StatsQuerySerializer(serializers.Serializer):
    """Query parameters of the statistics endpoint"""
    days = serializers.IntegerField(min_value=1, max_value=365, default=30)
    limit = serializers.IntegerField(min_value=1, max_value=100, default=10)
