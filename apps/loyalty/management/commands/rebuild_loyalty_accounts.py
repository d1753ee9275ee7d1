from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand, CommandError

from apps.loyalty.exceptions import PersistenceError
from apps.loyalty.services import LoyaltyService


class Command(BaseCommand):
    help = 'Rebuild loyalty counters from the points ledger'

    def add_arguments(self, parser):
        parser.add_argument(
            '--customer-id',
            type=int,
            help='Rebuild the account of a specific customer ID only',
        )

    def handle(self, *args, **options):
        User = get_user_model()
        customer_id = options.get('customer_id')

        if customer_id:
            if not User.objects.filter(id=customer_id).exists():
                raise CommandError(f'Customer with ID {customer_id} not found')
            customer_ids = [customer_id]
        else:
            customer_ids = list(User.objects.order_by('id').values_list('id', flat=True))

        service = LoyaltyService()
        rebuilt = 0
        failed = 0

        for current_id in customer_ids:
            try:
                account, changed = service.rebuild_account(current_id)
            except PersistenceError as e:
                failed += 1
                self.stdout.write(self.style.ERROR(f'Customer {current_id}: {e}'))
                continue

            if changed:
                rebuilt += 1
                self.stdout.write(
                    self.style.WARNING(
                        f'Customer {current_id}: counters corrected to '
                        f'{account.current_points} current / {account.lifetime_points} lifetime'
                    )
                )

        self.stdout.write(
            self.style.SUCCESS(
                f'Checked {len(customer_ids)} accounts. Corrected: {rebuilt}, Failed: {failed}'
            )
        )
