from django.core.management.base import BaseCommand
from apps.loyalty.models import LoyaltyTier


class Command(BaseCommand):
    help = 'Set up the default loyalty tiers'

    def handle(self, *args, **options):
        """Create or update loyalty tiers"""
        tiers = [
            {
                'name': 'Bronze',
                'description': 'Entry level membership',
                'min_points': 0,
                'color': '#CD7F32',
                'benefits': ['Basic point earning', 'Standard customer support'],
                'sort_order': 1,
            },
            {
                'name': 'Silver',
                'description': 'Valued customer tier',
                'min_points': 200,
                'color': '#C0C0C0',
                'benefits': ['Enhanced point earning (1.2x)', 'Priority customer support', 'Birthday bonus'],
                'sort_order': 2,
            },
            {
                'name': 'Gold',
                'description': 'Premium membership',
                'min_points': 500,
                'color': '#FFD700',
                'benefits': [
                    'Premium point earning (1.5x)', 'Dedicated support',
                    'Exclusive offers', 'Early access to sales'
                ],
                'sort_order': 3,
            },
            {
                'name': 'Platinum',
                'description': 'Elite membership',
                'min_points': 1000,
                'color': '#E5E4E2',
                'benefits': [
                    'Elite point earning (2x)', 'VIP support', 'Exclusive events',
                    'Personal shopping assistant', 'Free shipping on all orders'
                ],
                'sort_order': 4,
            },
        ]

        created_count = 0
        updated_count = 0

        for tier_data in tiers:
            tier, created = LoyaltyTier.objects.update_or_create(
                name=tier_data['name'],
                defaults=tier_data
            )

            if created:
                created_count += 1
                self.stdout.write(self.style.SUCCESS(f'Created tier: {tier.name}'))
            else:
                updated_count += 1
                self.stdout.write(self.style.WARNING(f'Updated tier: {tier.name}'))

        self.stdout.write(
            self.style.SUCCESS(
                f'Loyalty tiers setup complete. Created: {created_count}, Updated: {updated_count}'
            )
        )
