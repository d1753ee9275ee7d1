"""
Admin loyalty views: adjustments, customer lookups and statistics.
"""
from django.contrib.auth import get_user_model
from django.shortcuts import get_object_or_404
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAdminUser

from apps.common.utils import success_response, error_response

from ..services import LoyaltyService, LoyaltyReportService
from ..serializers import (
    AdjustSerializer, AdminLedgerEntrySerializer, AdminLedgerPageSerializer,
    BalanceSerializer, HistoryQuerySerializer, StatsQuerySerializer
)


@api_view(['POST'])
@permission_classes([IsAdminUser])
def adjust_points(request):
    """Adjust a customer's points balance"""
    serializer = AdjustSerializer(data=request.data)
    if not serializer.is_valid():
        return error_response('Invalid input', serializer.errors)

    data = serializer.validated_data
    customer = get_object_or_404(get_user_model(), pk=data['customer_id'])

    service = LoyaltyService()
    entry = service.adjust(
        customer.pk,
        data['points'],
        data['description'],
        override=data['override'],
        actor=request.user,
    )
    return success_response(
        {
            'entry': AdminLedgerEntrySerializer(entry).data,
            'balance': BalanceSerializer(service.get_balance(customer.pk)).data,
        },
        message='Points adjusted',
        status_code=status.HTTP_201_CREATED,
    )


@api_view(['GET'])
@permission_classes([IsAdminUser])
def customer_balance(request, customer_id):
    customer = get_object_or_404(get_user_model(), pk=customer_id)
    balance = LoyaltyService().get_balance(customer.pk)
    return success_response(BalanceSerializer(balance).data)


@api_view(['GET'])
@permission_classes([IsAdminUser])
def customer_history(request, customer_id):
    customer = get_object_or_404(get_user_model(), pk=customer_id)
    query = HistoryQuerySerializer(data=request.query_params)
    if not query.is_valid():
        return error_response('Invalid query parameters', query.errors)

    ledger_page = LoyaltyService().list_history(
        customer.pk,
        page=query.validated_data['page'],
        limit=query.validated_data.get('limit'),
    )
    return success_response(AdminLedgerPageSerializer(ledger_page).data)


@api_view(['GET'])
@permission_classes([IsAdminUser])
def order_entries(request, order_id):
    """Get every ledger entry that references an order"""
    entries = LoyaltyService().list_order_entries(order_id)
    return success_response(AdminLedgerEntrySerializer(entries, many=True).data)


@api_view(['GET'])
@permission_classes([IsAdminUser])
def loyalty_stats(request):
    """Get ledger statistics and top earners for the last N days"""
    query = StatsQuerySerializer(data=request.query_params)
    if not query.is_valid():
        return error_response('Invalid query parameters', query.errors)

    days = query.validated_data['days']
    stats = LoyaltyReportService.transaction_stats(days)
    stats['top_customers'] = LoyaltyReportService.top_customers(days, query.validated_data['limit'])
    return success_response(stats)
