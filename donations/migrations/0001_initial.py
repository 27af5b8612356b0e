# Generated migration for the donation ledger

from django.conf import settings
from django.db import migrations, models
import django.db.models.deletion
import django.utils.timezone

from donations.models import Donation, ResourceDonation


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Donation',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('donation_type', models.CharField(choices=Donation.TYPE_CHOICES, max_length=20)),
                ('status', models.CharField(choices=Donation.STATUS_CHOICES, default='pledged', max_length=20)),
                ('donation_date', models.DateTimeField(default=django.utils.timezone.now)),
                ('is_anonymous', models.BooleanField(default=False)),
                ('special_instructions', models.TextField(blank=True)),
                ('requires_pickup', models.BooleanField(default=False)),
                ('pickup_address', models.CharField(blank=True, max_length=500)),
                ('preferred_pickup_date', models.DateField(blank=True, null=True)),
                ('contact_phone', models.CharField(blank=True, max_length=30)),
                ('delivery_method', models.CharField(choices=Donation.DELIVERY_CHOICES, default='drop_off', max_length=20)),
                ('target_area', models.CharField(blank=True, help_text='Community or region this donation is meant for', max_length=200)),
                ('urgency_level', models.CharField(choices=Donation.URGENCY_CHOICES, default='normal', max_length=20)),
                ('amount', models.DecimalField(blank=True, decimal_places=2, max_digits=12, null=True)),
                ('currency', models.CharField(default='USD', max_length=3)),
                ('payment_method', models.CharField(blank=True, choices=Donation.PAYMENT_METHOD_CHOICES, max_length=20)),
                ('transaction_reference', models.CharField(blank=True, max_length=100)),
                ('is_tax_deductible', models.BooleanField(default=True)),
                ('receipt_required', models.BooleanField(default=False)),
                ('processed_date', models.DateTimeField(blank=True, null=True)),
                ('distribution_date', models.DateTimeField(blank=True, null=True)),
                ('notes', models.TextField(blank=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('donor', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='donations', to=settings.AUTH_USER_MODEL)),
                ('processed_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='processed_donations', to=settings.AUTH_USER_MODEL)),
                ('distributed_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='distributed_donations', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'verbose_name': 'Donation',
                'verbose_name_plural': 'Donations',
                'ordering': ['-donation_date', '-id'],
            },
        ),
        migrations.CreateModel(
            name='ResourceDonation',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('category', models.CharField(choices=ResourceDonation.CATEGORY_CHOICES, max_length=30)),
                ('item_name', models.CharField(max_length=200)),
                ('description', models.TextField(blank=True)),
                ('quantity', models.PositiveIntegerField()),
                ('remaining_quantity', models.PositiveIntegerField(help_text='Units not yet handed out in a distribution')),
                ('unit_of_measure', models.CharField(blank=True, max_length=50)),
                ('estimated_value', models.DecimalField(blank=True, decimal_places=2, max_digits=10, null=True)),
                ('condition', models.CharField(choices=ResourceDonation.CONDITION_CHOICES, default='good', max_length=20)),
                ('expiration_date', models.DateField(blank=True, null=True)),
                ('brand', models.CharField(blank=True, max_length=100)),
                ('size', models.CharField(blank=True, max_length=50)),
                ('weight', models.CharField(blank=True, max_length=50)),
                ('storage_requirements', models.CharField(blank=True, max_length=200)),
                ('allergen_info', models.CharField(blank=True, max_length=200)),
                ('status', models.CharField(choices=ResourceDonation.STATUS_CHOICES, default='available', max_length=20)),
                ('quality_check_date', models.DateTimeField(blank=True, null=True)),
                ('quality_notes', models.TextField(blank=True)),
                ('donation', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='resources', to='donations.donation')),
                ('quality_checked_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='quality_checked_resources', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'verbose_name': 'Resource Donation',
                'verbose_name_plural': 'Resource Donations',
                'ordering': ['donation', 'id'],
            },
        ),
        migrations.CreateModel(
            name='DonationTracking',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('status', models.CharField(choices=Donation.STATUS_CHOICES, max_length=20)),
                ('status_date', models.DateTimeField(default=django.utils.timezone.now)),
                ('location', models.CharField(blank=True, max_length=200)),
                ('notes', models.TextField(blank=True)),
                ('estimated_delivery', models.DateTimeField(blank=True, null=True)),
                ('donation', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='tracking_history', to='donations.donation')),
                ('updated_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='donation_tracking_entries', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'verbose_name': 'Donation Tracking Entry',
                'verbose_name_plural': 'Donation Tracking',
                'ordering': ['-status_date', '-id'],
            },
        ),
        migrations.CreateModel(
            name='DonationDistribution',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('distribution_date', models.DateTimeField(default=django.utils.timezone.now)),
                ('distribution_location', models.CharField(max_length=200)),
                ('number_of_recipients', models.PositiveIntegerField()),
                ('recipient_organization', models.CharField(blank=True, max_length=200)),
                ('contact_person', models.CharField(blank=True, max_length=100)),
                ('contact_phone', models.CharField(blank=True, max_length=30)),
                ('notes', models.TextField(blank=True)),
                ('feedback', models.TextField(blank=True)),
                ('donation', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='distributions', to='donations.donation')),
                ('distributed_by', models.ForeignKey(null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='donation_distributions', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'verbose_name': 'Donation Distribution',
                'verbose_name_plural': 'Donation Distributions',
                'ordering': ['-distribution_date', '-id'],
            },
        ),
        migrations.CreateModel(
            name='ResourceDistribution',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('quantity_distributed', models.PositiveIntegerField()),
                ('remaining_quantity', models.PositiveIntegerField(help_text='Units left on the resource line after this distribution')),
                ('notes', models.TextField(blank=True)),
                ('distribution', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='resource_distributions', to='donations.donationdistribution')),
                ('resource', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='distributions', to='donations.resourcedonation')),
            ],
            options={
                'ordering': ['distribution', 'id'],
            },
        ),
        migrations.CreateModel(
            name='DonationCenter',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=200)),
                ('address', models.CharField(max_length=500)),
                ('city', models.CharField(max_length=100)),
                ('state', models.CharField(blank=True, max_length=50)),
                ('zip_code', models.CharField(blank=True, max_length=20)),
                ('phone', models.CharField(blank=True, max_length=30)),
                ('email', models.EmailField(blank=True, max_length=254)),
                ('operating_hours', models.CharField(blank=True, max_length=200)),
                ('capacity', models.PositiveIntegerField(default=0)),
                ('current_utilization', models.PositiveIntegerField(default=0)),
                ('accepted_resource_types', models.CharField(blank=True, help_text='Comma-separated resource categories accepted here', max_length=500)),
                ('special_instructions', models.TextField(blank=True)),
                ('is_active', models.BooleanField(default=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('manager', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='managed_donation_centers', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'verbose_name': 'Donation Center',
                'verbose_name_plural': 'Donation Centers',
                'ordering': ['name'],
            },
        ),
    ]
