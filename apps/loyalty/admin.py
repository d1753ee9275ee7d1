from django.contrib import admin
from .models import LedgerEntry, LoyaltyAccount, PointsLot, LoyaltyTier, LoyaltyReward


@admin.register(LoyaltyAccount)
class LoyaltyAccountAdmin(admin.ModelAdmin):
    list_display = ['customer', 'current_points', 'lifetime_points', 'version', 'updated_at']
    search_fields = ['customer__username', 'customer__email']
    readonly_fields = ['customer', 'current_points', 'lifetime_points', 'version', 'created_at', 'updated_at']

    def has_add_permission(self, request):
        return False  # Accounts are created automatically

    def has_change_permission(self, request, obj=None):
        return False  # Counters follow the ledger, use rebuild_loyalty_accounts


@admin.register(LedgerEntry)
class LedgerEntryAdmin(admin.ModelAdmin):
    list_display = ['customer', 'kind', 'points', 'balance_after', 'description', 'order_id', 'created_at']
    list_filter = ['kind', 'created_at']
    search_fields = ['customer__username', 'description', 'order_id']
    readonly_fields = [field.name for field in LedgerEntry._meta.fields]

    def has_add_permission(self, request):
        return False  # Entries are created through LoyaltyService

    def has_change_permission(self, request, obj=None):
        return False  # Entries are immutable

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(PointsLot)
class PointsLotAdmin(admin.ModelAdmin):
    list_display = ['customer', 'original_points', 'remaining_points', 'earned_at', 'expires_at', 'is_expired', 'is_fully_consumed']
    list_filter = ['is_expired', 'is_fully_consumed', 'earned_at', 'expires_at']
    search_fields = ['customer__username']
    readonly_fields = [field.name for field in PointsLot._meta.fields]

    def has_add_permission(self, request):
        return False  # Lots are created automatically

    def has_change_permission(self, request, obj=None):
        return False


@admin.register(LoyaltyTier)
class LoyaltyTierAdmin(admin.ModelAdmin):
    list_display = ['name', 'min_points', 'color', 'is_active', 'sort_order']
    list_filter = ['is_active']
    search_fields = ['name', 'description']
    list_editable = ['is_active', 'sort_order']
    ordering = ['min_points']


@admin.register(LoyaltyReward)
class LoyaltyRewardAdmin(admin.ModelAdmin):
    list_display = ['name', 'reward_type', 'points_required', 'is_active', 'is_limited', 'remaining_quantity', 'starts_at', 'ends_at']
    list_filter = ['reward_type', 'is_active', 'is_limited']
    search_fields = ['name', 'description']
    list_editable = ['is_active']
    ordering = ['sort_order', 'points_required']
