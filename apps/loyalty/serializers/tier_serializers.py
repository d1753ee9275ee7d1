from rest_framework import serializers
from ..models import LoyaltyTier


class LoyaltyTierSerializer(serializers.ModelSerializer):
    """Serializer for the public tier table"""

    class Meta:
        model = LoyaltyTier
        fields = ['id', 'name', 'description', 'min_points', 'color', 'benefits', 'sort_order']
        read_only_fields = fields
