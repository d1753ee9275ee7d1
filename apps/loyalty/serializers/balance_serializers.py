"""
Balance and summary serializers.
"""
from rest_framework import serializers
from .ledger_serializers import LedgerEntrySerializer


class BalanceSerializer(serializers.Serializer):
    """
    Serializer for a customer's derived balance.
    Used for: GET /api/loyalty/balance/
    """
    customer_id = serializers.IntegerField()
    current_points = serializers.IntegerField()
    lifetime_points = serializers.IntegerField()
    tier = serializers.CharField()
    next_tier = serializers.CharField(allow_null=True)
    points_to_next_tier = serializers.IntegerField(allow_null=True)


class SummarySerializer(serializers.Serializer):
    """Serializer for the loyalty dashboard summary"""
    balance = BalanceSerializer()
    expiring_soon = serializers.IntegerField()
    expiring_soon_days = serializers.IntegerField()
    recent_entries = LedgerEntrySerializer(many=True)
