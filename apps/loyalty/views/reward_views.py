"""
Admin reward catalog management with RESTful API design.
"""
from rest_framework import viewsets, status
from rest_framework.decorators import action
from rest_framework.permissions import IsAdminUser

from apps.common.utils import success_response
from ..models import LoyaltyReward
from ..serializers import AdminLoyaltyRewardSerializer
from ..services import LoyaltyReportService


class AdminLoyaltyRewardViewSet(viewsets.ModelViewSet):
    """
    RESTful API for the reward catalog.

    Endpoints:
    - GET /loyalty/admin/rewards/ - List rewards
    - POST /loyalty/admin/rewards/ - Create reward
    - GET /loyalty/admin/rewards/{id}/ - Get reward detail
    - PUT /loyalty/admin/rewards/{id}/ - Update reward (full)
    - PATCH /loyalty/admin/rewards/{id}/ - Update reward (partial)
    - DELETE /loyalty/admin/rewards/{id}/ - Delete reward
    - GET /loyalty/admin/rewards/stats/ - Catalog and redemption statistics
    """
    serializer_class = AdminLoyaltyRewardSerializer
    permission_classes = [IsAdminUser]

    def get_queryset(self):
        queryset = LoyaltyReward.objects.all()
        is_active = self.request.query_params.get('is_active')
        if is_active in ('true', 'false'):
            queryset = queryset.filter(is_active=is_active == 'true')
        reward_type = self.request.query_params.get('reward_type')
        if reward_type:
            queryset = queryset.filter(reward_type=reward_type)
        return queryset

    def list(self, request, *args, **kwargs):
        serializer = self.get_serializer(self.get_queryset(), many=True)
        return success_response(serializer.data, 'Reward list retrieved successfully')

    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        self.perform_create(serializer)
        return success_response(serializer.data, 'Reward created successfully', status.HTTP_201_CREATED)

    def retrieve(self, request, *args, **kwargs):
        serializer = self.get_serializer(self.get_object())
        return success_response(serializer.data, 'Reward retrieved successfully')

    def update(self, request, *args, **kwargs):
        partial = kwargs.pop('partial', False)
        instance = self.get_object()
        serializer = self.get_serializer(instance, data=request.data, partial=partial)
        serializer.is_valid(raise_exception=True)
        self.perform_update(serializer)
        return success_response(serializer.data, 'Reward updated successfully')

    def destroy(self, request, *args, **kwargs):
        self.perform_destroy(self.get_object())
        return success_response(None, 'Reward deleted successfully')

    @action(detail=False, methods=['get'])
    def stats(self, request):
        return success_response(LoyaltyReportService.reward_stats())
