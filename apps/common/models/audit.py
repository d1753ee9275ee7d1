from django.db import models
from django.conf import settings


class AdminAuditLog(models.Model):
    """Audit log for admin actions"""

    ACTION_ADJUST = 'ADJUST'
    ACTION_OVERRIDE = 'OVERRIDE'
    ACTION_REBUILD = 'REBUILD'

    ACTION_CHOICES = [
        (ACTION_ADJUST, 'Adjust'),
        (ACTION_OVERRIDE, 'Override'),
        (ACTION_REBUILD, 'Rebuild'),
    ]

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='audit_logs'
    )
    action = models.CharField(max_length=10, choices=ACTION_CHOICES)
    model_name = models.CharField(max_length=100, null=True, blank=True)
    object_id = models.CharField(max_length=100, null=True, blank=True)
    object_repr = models.CharField(max_length=200, null=True, blank=True)
    message = models.TextField()
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'admin_audit_logs'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['user', 'created_at'], name='audit_user_created_idx'),
            models.Index(fields=['action', 'created_at'], name='audit_action_created_idx'),
            models.Index(fields=['model_name', 'created_at'], name='audit_model_created_idx'),
        ]

    def __str__(self):
        actor = self.user.username if self.user else 'system'
        return f"{actor} - {self.action} - {self.created_at}"

    @classmethod
    def record(cls, action, message, user=None, obj=None):
        """Write an audit row for an admin action on ``obj``"""
        return cls.objects.create(
            user=user,
            action=action,
            model_name=obj._meta.label if obj is not None else None,
            object_id=str(obj.pk) if obj is not None else None,
            object_repr=str(obj)[:200] if obj is not None else None,
            message=message,
        )
