"""
Redemption service: validated point spending.
"""
import logging

from django.db import transaction
from django.utils import timezone

from ..exceptions import ConcurrencyConflictError, InsufficientPointsError
from ..models import LedgerEntry
from ..validators import validate_description, validate_points
from .expiry_sweeper import ExpirySweeper
from .ledger_store import LedgerStore

logger = logging.getLogger(__name__)


class RedemptionService:
    """Spends current points, all or nothing"""

    # One automatic retry after a lost race
    MAX_ATTEMPTS = 2

    def __init__(self, store=None, sweeper=None):
        self.store = store or LedgerStore()
        self.sweeper = sweeper or ExpirySweeper(self.store)

    def redeem(self, customer_id, points_requested, description, order_id=None, metadata=None):
        """
        Redeem points for a customer.

        Raises:
            ValidationError: Non-positive or non-integer points, empty description
            InsufficientPointsError: More points requested than available
            ConcurrencyConflictError: The retry lost the race as well
            PersistenceError: The ledger could not be written

        Returns:
            LedgerEntry: The ``redeemed`` entry
        """
        points = validate_points(points_requested)
        description = validate_description(description)

        for attempt in range(1, self.MAX_ATTEMPTS + 1):
            try:
                entry = self._redeem_once(customer_id, points, description, order_id, metadata)
            except ConcurrencyConflictError:
                if attempt == self.MAX_ATTEMPTS:
                    raise
                logger.warning("Redemption for customer %s hit a concurrent write, retrying", customer_id)
                continue
            except InsufficientPointsError as exc:
                logger.warning(
                    "Redemption rejected for customer %s: requested=%s available=%s",
                    customer_id, exc.requested, exc.available
                )
                raise

            logger.info("Customer %s redeemed %s points (entry %s)", customer_id, points, entry.id)
            return entry

    def _redeem_once(self, customer_id, points, description, order_id, metadata):
        with transaction.atomic():
            self.store.lock_account(customer_id)
            # Lapsed points must not be spendable
            self.sweeper.expire_lapsed_lots(customer_id, timezone.now())
            account = self.store.lock_account(customer_id)

            if points > account.current_points:
                raise InsufficientPointsError(requested=points, available=max(account.current_points, 0))

            return self.store.append(LedgerEntry(
                customer_id=customer_id,
                kind=LedgerEntry.KIND_REDEEMED,
                points=-points,
                description=description,
                order_id=str(order_id) if order_id else None,
                metadata=metadata or {},
            ))
