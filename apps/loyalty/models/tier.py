from django.db import models


class LoyaltyTier(models.Model):
    """Loyalty tier definitions, keyed by lifetime points"""
    name = models.CharField(max_length=100, unique=True)
    description = models.TextField(blank=True)
    min_points = models.PositiveIntegerField(unique=True)
    color = models.CharField(max_length=7, default='#000000')
    benefits = models.JSONField(default=list, blank=True)
    is_active = models.BooleanField(default=True)
    sort_order = models.IntegerField(default=0)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'loyalty_tiers'
        ordering = ['min_points']
        verbose_name = 'Loyalty Tier'
        verbose_name_plural = 'Loyalty Tiers'

    def __str__(self):
        return f"{self.name} ({self.min_points}+ points)"
