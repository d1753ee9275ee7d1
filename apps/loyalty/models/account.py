from django.db import models
from django.conf import settings


class LoyaltyAccount(models.Model):
    """
    Materialized per-customer counters.

    The row is a performance cache over the ledger and the per-customer
    serialization point for writers; it can always be rebuilt from the ledger.
    """
    customer = models.OneToOneField(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='loyalty_account')
    current_points = models.IntegerField(default=0)
    lifetime_points = models.IntegerField(default=0)  # Never decremented
    version = models.PositiveIntegerField(default=0)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'loyalty_accounts'
        verbose_name = 'Loyalty Account'
        verbose_name_plural = 'Loyalty Accounts'

    def __str__(self):
        return f"{self.customer_id} - {self.current_points} points"
