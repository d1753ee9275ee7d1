from django.db import models
from django.conf import settings
from django.utils import timezone

from ..exceptions import ValidationError


class LedgerEntry(models.Model):
    """One immutable point-affecting event for a customer"""
    KIND_EARNED = 'earned'
    KIND_REDEEMED = 'redeemed'
    KIND_EXPIRED = 'expired'
    KIND_ADJUSTED = 'adjusted'

    KIND_CHOICES = [
        (KIND_EARNED, 'Points Earned'),
        (KIND_REDEEMED, 'Points Redeemed'),
        (KIND_EXPIRED, 'Points Expired'),
        (KIND_ADJUSTED, 'Manual Adjustment'),
    ]

    # Kinds whose positive amounts count towards lifetime points
    LIFETIME_KINDS = (KIND_EARNED, KIND_ADJUSTED)

    customer = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='loyalty_entries')
    points = models.IntegerField()  # Positive for earning, negative for spending/expiration
    kind = models.CharField(max_length=20, choices=KIND_CHOICES)
    description = models.CharField(max_length=255)
    order_id = models.CharField(max_length=100, blank=True, null=True, db_index=True)
    balance_after = models.IntegerField()  # Customer balance after this entry
    expires_at = models.DateTimeField(null=True, blank=True)
    source_entry = models.ForeignKey(
        'self', on_delete=models.PROTECT, null=True, blank=True, related_name='expirations'
    )
    metadata = models.JSONField(default=dict, blank=True)
    created_at = models.DateTimeField(default=timezone.now, db_index=True)

    class Meta:
        db_table = 'loyalty_ledger_entries'
        ordering = ['-created_at', '-id']
        indexes = [
            models.Index(fields=['customer', 'created_at'], name='loyalty_entry_customer_idx'),
            models.Index(fields=['kind', 'created_at'], name='loyalty_entry_kind_idx'),
        ]
        verbose_name = 'Ledger Entry'
        verbose_name_plural = 'Ledger Entries'

    def __str__(self):
        return f"{self.customer_id} - {self.points} points ({self.get_kind_display()})"

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ValidationError("Ledger entries are immutable; record an adjustment instead.")
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValidationError("Ledger entries cannot be deleted; record an adjustment instead.")

    @property
    def counts_towards_lifetime(self):
        return self.kind in self.LIFETIME_KINDS and self.points > 0
