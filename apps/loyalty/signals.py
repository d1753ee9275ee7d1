from django.conf import settings
from django.db import transaction
from django.db.models.signals import post_save
from django.dispatch import Signal, receiver

# Sent after a ledger entry has been stored; kwargs: entry, customer_id
ledger_entry_appended = Signal()

# Sent after a counter row was rebuilt from the ledger; kwargs: customer_id
loyalty_account_rebuilt = Signal()


@receiver(ledger_entry_appended)
@receiver(loyalty_account_rebuilt)
def invalidate_cached_balance(sender, customer_id, **kwargs):
    """Drop the cached balance now and again once the surrounding transaction commits"""
    from .services.balance_aggregator import invalidate_balance

    invalidate_balance(customer_id)
    transaction.on_commit(lambda: invalidate_balance(customer_id))


@receiver(post_save, sender=settings.AUTH_USER_MODEL)
def create_loyalty_account_for_new_customer(sender, instance, created, **kwargs):
    """Create the loyalty counter row for new customers"""
    if created:
        from .models import LoyaltyAccount

        LoyaltyAccount.objects.get_or_create(customer=instance)
