"""
Internal loyalty views for integration with the order system.
"""
from django.contrib.auth import get_user_model
from django.shortcuts import get_object_or_404
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAdminUser

from apps.common.utils import success_response, error_response

from ..services import LoyaltyService
from ..serializers import EarnSerializer, LedgerEntrySerializer


@api_view(['POST'])
@permission_classes([IsAdminUser])
def internal_earn_points(request):
    """Credit points when an order completes"""
    serializer = EarnSerializer(data=request.data)
    if not serializer.is_valid():
        return error_response('Invalid input', serializer.errors)

    data = serializer.validated_data
    customer = get_object_or_404(get_user_model(), pk=data['customer_id'])
    entry = LoyaltyService().earn(
        customer.pk,
        data['points'],
        data['description'],
        order_id=data.get('order_id') or None,
        expires_at=data.get('expires_at'),
    )
    return success_response(
        LedgerEntrySerializer(entry).data,
        message='Points awarded',
        status_code=status.HTTP_201_CREATED,
    )
