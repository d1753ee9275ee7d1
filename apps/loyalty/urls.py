from django.urls import path, include
from rest_framework.routers import DefaultRouter
from . import views

app_name = 'loyalty'

router = DefaultRouter()
router.register(r'admin/rewards', views.AdminLoyaltyRewardViewSet, basename='admin_reward')

urlpatterns = [
    # Customer endpoints
    path('balance/', views.get_balance, name='balance'),
    path('summary/', views.get_summary, name='summary'),
    path('history/', views.get_history, name='history'),
    path('redeem/', views.redeem_points, name='redeem'),
    path('tiers/', views.list_tiers, name='tiers'),
    path('rewards/', views.list_rewards, name='rewards'),
    path('rewards/<int:reward_id>/redeem/', views.redeem_reward, name='redeem_reward'),

    # Admin endpoints
    path('admin/adjust/', views.adjust_points, name='admin_adjust'),
    path('admin/customers/<int:customer_id>/balance/', views.customer_balance, name='admin_customer_balance'),
    path('admin/customers/<int:customer_id>/history/', views.customer_history, name='admin_customer_history'),
    path('admin/orders/<str:order_id>/entries/', views.order_entries, name='admin_order_entries'),
    path('admin/stats/', views.loyalty_stats, name='admin_stats'),

    # Internal endpoints (for integration with the order system)
    path('internal/earn/', views.internal_earn_points, name='internal_earn'),

    path('', include(router.urls)),
]
