from django.contrib import admin
from .models import AdminAuditLog


@admin.register(AdminAuditLog)
class AdminAuditLogAdmin(admin.ModelAdmin):
    list_display = ['user', 'action', 'model_name', 'object_id', 'created_at']
    list_filter = ['action', 'model_name', 'created_at']
    search_fields = ['user__username', 'object_repr', 'message']
    readonly_fields = ['user', 'action', 'model_name', 'object_id', 'object_repr', 'message', 'created_at']

    def has_add_permission(self, request):
        return False  # Audit entries are written by the services

    def has_change_permission(self, request, obj=None):
        return False
