from django.db import migrations, models


class Migration(migrations.Migration):

    dependencies = [
        ('loyalty', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='LoyaltyReward',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=255)),
                ('description', models.TextField(blank=True)),
                ('reward_type', models.CharField(choices=[('discount', 'Discount'), ('free_shipping', 'Free Shipping'), ('free_product', 'Free Product'), ('cashback', 'Cashback'), ('gift_card', 'Gift Card'), ('exclusive_access', 'Exclusive Access')], max_length=20)),
                ('points_required', models.PositiveIntegerField()),
                ('value', models.DecimalField(blank=True, decimal_places=2, max_digits=10, null=True)),
                ('discount_type', models.CharField(blank=True, choices=[('percentage', 'Percentage'), ('fixed', 'Fixed Amount')], max_length=10, null=True)),
                ('conditions', models.JSONField(blank=True, default=dict)),
                ('is_active', models.BooleanField(default=True)),
                ('is_limited', models.BooleanField(default=False)),
                ('total_quantity', models.PositiveIntegerField(blank=True, null=True)),
                ('remaining_quantity', models.PositiveIntegerField(blank=True, null=True)),
                ('starts_at', models.DateTimeField(blank=True, null=True)),
                ('ends_at', models.DateTimeField(blank=True, null=True)),
                ('image_url', models.URLField(blank=True, max_length=500)),
                ('terms_conditions', models.TextField(blank=True)),
                ('tier_restrictions', models.JSONField(blank=True, default=list)),
                ('auto_apply', models.BooleanField(default=False)),
                ('sort_order', models.IntegerField(default=0)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'verbose_name': 'Loyalty Reward',
                'verbose_name_plural': 'Loyalty Rewards',
                'db_table': 'loyalty_rewards',
                'ordering': ['sort_order', 'points_required', 'id'],
                'indexes': [models.Index(fields=['is_active', 'starts_at', 'ends_at'], name='loyalty_reward_window_idx')],
            },
        ),
    ]
