from django.core.management.base import BaseCommand, CommandError
from django.utils import timezone
from django.utils.dateparse import parse_datetime

from apps.loyalty.services import LoyaltyService


class Command(BaseCommand):
    help = 'Expire loyalty points that are past their expiry date'

    def add_arguments(self, parser):
        parser.add_argument(
            '--customer-id',
            type=int,
            help='Expire points for specific customer ID only',
        )
        parser.add_argument(
            '--as-of',
            help='Expire lots lapsed as of this past ISO 8601 timestamp (default: now)',
        )

    def handle(self, *args, **options):
        customer_id = options.get('customer_id')
        now = self._parse_as_of(options.get('as_of'))
        service = LoyaltyService()

        if customer_id:
            from django.contrib.auth import get_user_model
            User = get_user_model()

            if not User.objects.filter(id=customer_id).exists():
                raise CommandError(f'Customer with ID {customer_id} not found')

            entries = service.expire_points(customer_id=customer_id, now=now)
            expired_points = sum(-entry.points for entry in entries)
            self.stdout.write(
                self.style.SUCCESS(
                    f'Expired {expired_points} points for customer {customer_id}'
                )
            )
            return

        self.stdout.write('Starting points expiration for all customers...')
        result = service.expire_points(now=now)

        self.stdout.write(
            self.style.SUCCESS(
                f'Points expiration complete. Customers: {result.customers_swept}, '
                f'entries: {result.entries_created}, total expired: {result.points_expired} points'
            )
        )
        if result.failed_customers:
            failed = ', '.join(str(customer_id) for customer_id in result.failed_customers)
            self.stdout.write(self.style.ERROR(f'Failed customers: {failed}'))

    def _parse_as_of(self, value):
        if not value:
            return timezone.now()
        parsed = parse_datetime(value)
        if parsed is None:
            raise CommandError(f'Invalid --as-of timestamp: {value}')
        if timezone.is_naive(parsed):
            parsed = timezone.make_aware(parsed)
        if parsed > timezone.now():
            raise CommandError(f'--as-of cannot be in the future: {value}')
        return parsed
