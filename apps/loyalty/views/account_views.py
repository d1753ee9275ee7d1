"""
Customer-facing loyalty views.
"""
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny, IsAuthenticated

from apps.common.utils import success_response, error_response

from ..models import LoyaltyTier
from ..services import LoyaltyService, TierPolicy
from ..serializers import (
    BalanceSerializer, SummarySerializer, LedgerPageSerializer, LedgerEntrySerializer,
    LoyaltyTierSerializer, LoyaltyRewardSerializer, RedeemSerializer, HistoryQuerySerializer
)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def get_balance(request):
    """Get current user's loyalty balance and tier"""
    balance = LoyaltyService().get_balance(request.user.id)
    return success_response(BalanceSerializer(balance).data)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def get_summary(request):
    """Get current user's loyalty dashboard summary"""
    summary = LoyaltyService().get_summary(request.user.id)
    return success_response(SummarySerializer(summary).data)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def get_history(request):
    """Get current user's ledger entries, newest first"""
    query = HistoryQuerySerializer(data=request.query_params)
    if not query.is_valid():
        return error_response('Invalid query parameters', query.errors)

    ledger_page = LoyaltyService().list_history(
        request.user.id,
        page=query.validated_data['page'],
        limit=query.validated_data.get('limit'),
    )
    return success_response(LedgerPageSerializer(ledger_page).data)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def redeem_points(request):
    """Redeem points from the current user's balance"""
    serializer = RedeemSerializer(data=request.data)
    if not serializer.is_valid():
        return error_response('Invalid input', serializer.errors)

    service = LoyaltyService()
    entry = service.redeem(
        request.user.id,
        serializer.validated_data['points'],
        serializer.validated_data['description'],
        order_id=serializer.validated_data.get('order_id') or None,
    )
    return success_response(
        {
            'entry': LedgerEntrySerializer(entry).data,
            'balance': BalanceSerializer(service.get_balance(request.user.id)).data,
        },
        message='Points redeemed',
        status_code=status.HTTP_201_CREATED,
    )


@api_view(['GET'])
@permission_classes([AllowAny])
def list_tiers(request):
    """Get the tier table; falls back to the configured thresholds when no tiers are stored"""
    tiers = LoyaltyTier.objects.filter(is_active=True).order_by('min_points')
    if tiers.exists():
        return success_response(LoyaltyTierSerializer(tiers, many=True).data)

    return success_response([
        {'name': tier.name, 'min_points': tier.min_points}
        for tier in TierPolicy.from_settings().tiers
    ])


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def list_rewards(request):
    """Get the rewards the current user's tier can redeem right now"""
    rewards = LoyaltyService().available_rewards(request.user.id)
    return success_response(LoyaltyRewardSerializer(rewards, many=True).data)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def redeem_reward(request, reward_id):
    """Exchange the current user's points for a catalog reward"""
    service = LoyaltyService()
    entry, reward = service.redeem_reward(request.user.id, reward_id)
    return success_response(
        {
            'entry': LedgerEntrySerializer(entry).data,
            'reward': LoyaltyRewardSerializer(reward).data,
            'balance': BalanceSerializer(service.get_balance(request.user.id)).data,
        },
        message='Reward redeemed',
        status_code=status.HTTP_201_CREATED,
    )
