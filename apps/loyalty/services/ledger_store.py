"""
Points ledger store: append-only storage of loyalty ledger entries.

Every write goes through ``LedgerStore.append`` which, in one transaction,
updates the customer's counter row, stores the entry and keeps the points
lots in step with it.
"""
import logging
from dataclasses import dataclass, field

from django.db import DatabaseError, transaction
from django.db.models import F, Q, Sum
from django.utils import timezone

from ..exceptions import (
    ConcurrencyConflictError, LoyaltyError, PersistenceError, ValidationError
)
from ..models import LedgerEntry, LoyaltyAccount, PointsLot
from ..signals import ledger_entry_appended, loyalty_account_rebuilt
from ..validators import validate_description

logger = logging.getLogger(__name__)

# Sign each kind's points must have
SIGN_RULES = {
    LedgerEntry.KIND_EARNED: lambda points: points > 0,
    LedgerEntry.KIND_REDEEMED: lambda points: points < 0,
    LedgerEntry.KIND_EXPIRED: lambda points: points < 0,
    LedgerEntry.KIND_ADJUSTED: lambda points: points != 0,
}


@dataclass
class LedgerPage:
    """One page of a customer's ledger, newest first"""
    entries: list = field(default_factory=list)
    page: int = 1
    limit: int = 20
    total: int = 0
    has_next: bool = False


class LedgerStore:
    """Append-only access to the loyalty ledger"""

    def lock_account(self, customer_id):
        """
        Lock and return the customer's counter row, creating it on first use.

        Must be called inside ``transaction.atomic()``. A missing row is
        seeded from a ledger replay so it never disagrees with the ledger.
        """
        try:
            account = LoyaltyAccount.objects.select_for_update().filter(customer_id=customer_id).first()
            if account is None:
                current_points, lifetime_points = self.replay(customer_id)
                LoyaltyAccount.objects.get_or_create(
                    customer_id=customer_id,
                    defaults={'current_points': current_points, 'lifetime_points': lifetime_points},
                )
                account = LoyaltyAccount.objects.select_for_update().get(customer_id=customer_id)
            return account
        except DatabaseError as exc:
            logger.exception("Failed to lock loyalty account for customer %s", customer_id)
            raise PersistenceError(customer_id=customer_id) from exc

    def append(self, entry, allow_negative=False):
        """
        Store a new ledger entry.

        Args:
            entry: Unsaved ``LedgerEntry``
            allow_negative: Let a debit take the balance below zero
                (administrative override only)

        Raises:
            ValidationError: Entry is already stored or breaks the sign rules
            ConcurrencyConflictError: The debit no longer fits the balance
            PersistenceError: The database write failed

        Returns:
            LedgerEntry: The stored entry with ``id`` and ``balance_after`` set
        """
        self._validate(entry)
        if entry.created_at is None:
            entry.created_at = timezone.now()

        try:
            with transaction.atomic():
                previous_balance = self._apply_to_account(entry, allow_negative)
                entry.save(force_insert=True)
                self._apply_to_lots(entry, previous_balance)
        except LoyaltyError:
            raise
        except DatabaseError as exc:
            logger.exception("Failed to append %s entry for customer %s", entry.kind, entry.customer_id)
            raise PersistenceError(customer_id=entry.customer_id) from exc

        logger.info(
            "Ledger entry %s appended: customer=%s kind=%s points=%s balance_after=%s",
            entry.id, entry.customer_id, entry.kind, entry.points, entry.balance_after
        )
        ledger_entry_appended.send(sender=LedgerEntry, entry=entry, customer_id=entry.customer_id)
        return entry

    def list_by_customer(self, customer_id, page=1, limit=20):
        """Page through a customer's entries ordered by created_at descending"""
        if page < 1:
            raise ValidationError("Page must be 1 or greater.", field='page')
        if limit < 1:
            raise ValidationError("Limit must be 1 or greater.", field='limit')

        queryset = LedgerEntry.objects.filter(customer_id=customer_id).order_by('-created_at', '-id')
        total = queryset.count()
        start = (page - 1) * limit
        end = start + limit
        return LedgerPage(
            entries=list(queryset[start:end]),
            page=page,
            limit=limit,
            total=total,
            has_next=end < total,
        )

    def list_by_order(self, order_id):
        """Entries that reference an order, in insertion order"""
        return list(LedgerEntry.objects.filter(order_id=str(order_id)).order_by('created_at', 'id'))

    def sum_active_points(self, customer_id, as_of=None):
        """
        Points that are spendable at ``as_of``.

        Scans the open lots: entries already expired, fully consumed or
        whose expiry date is not after ``as_of`` do not count.
        """
        as_of = as_of or timezone.now()
        return PointsLot.objects.for_customer(customer_id).active(as_of).total_remaining()

    def replay(self, customer_id):
        """Recompute ``(current_points, lifetime_points)`` purely from the ledger"""
        totals = LedgerEntry.objects.filter(customer_id=customer_id).aggregate(
            current=Sum('points'),
            lifetime=Sum('points', filter=Q(points__gt=0, kind__in=LedgerEntry.LIFETIME_KINDS)),
        )
        return totals['current'] or 0, totals['lifetime'] or 0

    def rebuild_account(self, customer_id):
        """
        Overwrite the counter row with a ledger replay.

        Returns:
            tuple: (account, changed) where ``changed`` tells whether the
            stored counters disagreed with the ledger
        """
        try:
            with transaction.atomic():
                account = self.lock_account(customer_id)
                current_points, lifetime_points = self.replay(customer_id)
                changed = (account.current_points, account.lifetime_points) != (current_points, lifetime_points)
                if changed:
                    logger.warning(
                        "Loyalty account %s drifted from ledger: stored=(%s, %s) replayed=(%s, %s)",
                        customer_id, account.current_points, account.lifetime_points,
                        current_points, lifetime_points
                    )
                    account.current_points = current_points
                    account.lifetime_points = lifetime_points
                    account.version += 1
                    account.save(update_fields=['current_points', 'lifetime_points', 'version', 'updated_at'])
        except LoyaltyError:
            raise
        except DatabaseError as exc:
            logger.exception("Failed to rebuild loyalty account for customer %s", customer_id)
            raise PersistenceError(customer_id=customer_id) from exc

        loyalty_account_rebuilt.send(sender=LoyaltyAccount, customer_id=customer_id)
        return account, changed

    def _validate(self, entry):
        if not entry._state.adding or entry.pk is not None:
            raise ValidationError("Ledger entries are immutable; record an adjustment instead.")

        if entry.kind not in SIGN_RULES:
            raise ValidationError(f"Unknown ledger entry kind: {entry.kind}", field='kind')

        if isinstance(entry.points, bool) or not isinstance(entry.points, int):
            raise ValidationError("Points must be a whole number.", field='points')

        if not SIGN_RULES[entry.kind](entry.points):
            raise ValidationError(
                f"Points {entry.points} are not valid for a {entry.kind} entry.", field='points'
            )

        entry.description = validate_description(entry.description)

        if entry.expires_at is not None and entry.kind != LedgerEntry.KIND_EARNED:
            raise ValidationError("Only earned entries can expire.", field='expires_at')

    def _apply_to_account(self, entry, allow_negative):
        """Move the counters by the entry's points; returns the balance before the move"""
        account = self.lock_account(entry.customer_id)
        previous_balance = account.current_points

        lifetime_delta = entry.points if entry.counts_towards_lifetime else 0
        queryset = LoyaltyAccount.objects.filter(pk=account.pk)
        if entry.points < 0 and not allow_negative:
            # Conditional decrement, the database refuses to overdraw
            queryset = queryset.filter(current_points__gte=-entry.points)

        updated = queryset.update(
            current_points=F('current_points') + entry.points,
            lifetime_points=F('lifetime_points') + lifetime_delta,
            version=F('version') + 1,
            updated_at=timezone.now(),
        )
        if not updated:
            raise ConcurrencyConflictError(customer_id=entry.customer_id)

        entry.balance_after = LoyaltyAccount.objects.values_list('current_points', flat=True).get(pk=account.pk)
        return previous_balance

    def _apply_to_lots(self, entry, previous_balance):
        if entry.points > 0:
            # A deficit left by an override is paid off before the lot holds anything
            remaining = entry.points if previous_balance >= 0 else max(0, entry.points + previous_balance)
            PointsLot.objects.create(
                entry=entry,
                customer_id=entry.customer_id,
                original_points=entry.points,
                remaining_points=remaining,
                earned_at=entry.created_at,
                expires_at=entry.expires_at,
                is_fully_consumed=remaining == 0,
            )
        elif entry.kind == LedgerEntry.KIND_EXPIRED and entry.source_entry_id is not None:
            self._expire_lot(entry)
        else:
            self._consume_fifo(entry.customer_id, -entry.points)

    def _expire_lot(self, entry):
        lot = PointsLot.objects.select_for_update().get(entry_id=entry.source_entry_id)
        amount = -entry.points
        if lot.customer_id != entry.customer_id or amount > lot.remaining_points:
            raise ValidationError(
                f"Cannot expire {amount} points from a lot holding {lot.remaining_points}.",
                field='points'
            )
        lot.remaining_points -= amount
        lot.is_expired = lot.remaining_points == 0
        lot.save(update_fields=['remaining_points', 'is_expired', 'updated_at'])

    def _consume_fifo(self, customer_id, amount):
        """Draw ``amount`` from the customer's open lots, oldest earn first"""
        lots = PointsLot.objects.select_for_update().for_customer(customer_id).open().fifo()
        for lot in lots:
            if amount <= 0:
                break
            amount -= lot.consume(amount)
            lot.save(update_fields=['remaining_points', 'is_fully_consumed', 'updated_at'])
        # Anything left over is an overdraft recorded as a negative balance
        return amount
