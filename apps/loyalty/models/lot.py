from datetime import timedelta

from django.db import models
from django.conf import settings
from django.db.models import Q, Sum
from django.utils import timezone


class PointsLotQuerySet(models.QuerySet):

    def for_customer(self, customer_id):
        return self.filter(customer_id=customer_id)

    def open(self):
        """Lots that still hold spendable points"""
        return self.filter(is_expired=False, remaining_points__gt=0)

    def lapsed(self, now):
        """Open lots whose expiry date has passed"""
        return self.open().filter(expires_at__isnull=False, expires_at__lte=now)

    def active(self, as_of):
        """Open lots that are still valid at ``as_of``"""
        return self.open().filter(Q(expires_at__isnull=True) | Q(expires_at__gt=as_of))

    def fifo(self):
        return self.order_by('earned_at', 'id')

    def total_remaining(self):
        return self.aggregate(total=Sum('remaining_points'))['total'] or 0


class PointsLot(models.Model):
    """
    Remaining amount of one positive ledger entry.

    Redemptions draw lots down oldest first; the expiry sweeper expires
    whatever remainder is left once ``expires_at`` passes.
    """
    entry = models.OneToOneField('LedgerEntry', on_delete=models.CASCADE, related_name='lot')
    customer = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='loyalty_lots')
    original_points = models.IntegerField()
    remaining_points = models.IntegerField()
    earned_at = models.DateTimeField()
    expires_at = models.DateTimeField(null=True, blank=True)
    is_expired = models.BooleanField(default=False)
    is_fully_consumed = models.BooleanField(default=False)
    updated_at = models.DateTimeField(auto_now=True)

    objects = PointsLotQuerySet.as_manager()

    class Meta:
        db_table = 'loyalty_points_lots'
        ordering = ['earned_at', 'id']
        indexes = [
            models.Index(fields=['customer', 'is_expired', 'expires_at'], name='loyalty_lot_customer_idx'),
            models.Index(fields=['expires_at', 'is_expired'], name='loyalty_lot_expiry_idx'),
        ]
        verbose_name = 'Points Lot'
        verbose_name_plural = 'Points Lots'

    def __str__(self):
        return f"{self.customer_id} - {self.remaining_points}/{self.original_points} points"

    def consume(self, amount):
        """Take up to ``amount`` points from this lot, returns the amount taken"""
        taken = min(amount, self.remaining_points)
        self.remaining_points -= taken
        self.is_fully_consumed = self.remaining_points == 0
        return taken

    @classmethod
    def expiring_points(cls, customer_id, within_days, now=None):
        """Points of a customer that expire within the next ``within_days`` days"""
        now = now or timezone.now()
        return cls.objects.for_customer(customer_id).active(now).filter(
            expires_at__lte=now + timedelta(days=within_days)
        ).total_remaining()
