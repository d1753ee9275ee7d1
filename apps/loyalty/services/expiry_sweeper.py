"""
Expiry sweeper: turns lapsed earned points into expired ledger entries.
"""
import logging
from dataclasses import dataclass, field

from django.db import transaction
from django.utils import timezone

from ..exceptions import PersistenceError
from ..models import LedgerEntry, PointsLot
from .ledger_store import LedgerStore

logger = logging.getLogger(__name__)


@dataclass
class SweepResult:
    customers_swept: int = 0
    entries_created: int = 0
    points_expired: int = 0
    failed_customers: list = field(default_factory=list)


class ExpirySweeper:
    """
    Expires the untouched remainder of lapsed points lots.

    A lot is zeroed in the same transaction as its expired entry, so a
    second sweep over the same period finds nothing left to expire.
    """

    def __init__(self, store=None):
        self.store = store or LedgerStore()

    def sweep(self, now=None):
        """Sweep every customer holding lapsed lots; one transaction per customer"""
        now = now or timezone.now()
        result = SweepResult()

        customer_ids = (
            PointsLot.objects.lapsed(now)
            .order_by('customer_id')
            .values_list('customer_id', flat=True)
            .distinct()
        )
        for customer_id in list(customer_ids):
            try:
                entries = self.sweep_customer(customer_id, now)
            except PersistenceError:
                logger.exception("Points expiry failed for customer %s", customer_id)
                result.failed_customers.append(customer_id)
                continue

            if entries:
                result.customers_swept += 1
                result.entries_created += len(entries)
                result.points_expired += sum(-entry.points for entry in entries)

        logger.info(
            "Points expiry sweep as of %s: %s customers, %s entries, %s points expired, %s failed",
            now.isoformat(), result.customers_swept, result.entries_created,
            result.points_expired, len(result.failed_customers)
        )
        return result

    def sweep_customer(self, customer_id, now=None):
        """Expire one customer's lapsed lots, returns the expired entries"""
        now = now or timezone.now()
        with transaction.atomic():
            self.store.lock_account(customer_id)
            return self.expire_lapsed_lots(customer_id, now)

    def expire_lapsed_lots(self, customer_id, now):
        """
        Append an expired entry for each lot of the customer lapsed at ``now``.

        ``now`` only selects the lapsed lots; the entries are stamped with
        the wall clock so the history stays in append order. The caller
        must hold the customer's account lock.
        """
        entries = []
        lots = (
            PointsLot.objects.select_for_update()
            .for_customer(customer_id)
            .lapsed(now)
            .select_related('entry')
            .fifo()
        )
        for lot in lots:
            entry = LedgerEntry(
                customer_id=customer_id,
                kind=LedgerEntry.KIND_EXPIRED,
                points=-lot.remaining_points,
                description=f"Points expired from {lot.earned_at.date()}",
                source_entry=lot.entry,
                order_id=lot.entry.order_id,
            )
            entries.append(self.store.append(entry))
        return entries
