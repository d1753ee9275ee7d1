"""
Ledger entry serializers for history and order views.
"""
from rest_framework import serializers
from ..models import LedgerEntry


class LedgerEntrySerializer(serializers.ModelSerializer):
    """
    Serializer for one ledger entry in a customer's history.
    Used for: GET /api/loyalty/history/
    """
    kind_display = serializers.CharField(source='get_kind_display', read_only=True)

    class Meta:
        model = LedgerEntry
        fields = [
            'id', 'kind', 'kind_display', 'points', 'balance_after',
            'description', 'order_id', 'expires_at', 'created_at'
        ]
        read_only_fields = fields


class AdminLedgerEntrySerializer(LedgerEntrySerializer):
    """
    Ledger entry with the fields only admins see.
    Used for: GET /api/loyalty/admin/customers/{id}/history/
    """

    class Meta(LedgerEntrySerializer.Meta):
        fields = LedgerEntrySerializer.Meta.fields + ['customer', 'source_entry', 'metadata']
        read_only_fields = fields


class LedgerPageSerializer(serializers.Serializer):
    """Paged history response"""
    entries = LedgerEntrySerializer(many=True)
    page = serializers.IntegerField()
    limit = serializers.IntegerField()
    total = serializers.IntegerField()
    has_next = serializers.BooleanField()


class AdminLedgerPageSerializer(LedgerPageSerializer):
    entries = AdminLedgerEntrySerializer(many=True)
