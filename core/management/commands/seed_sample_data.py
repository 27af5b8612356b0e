"""
Management command to load a small demo data set.

Creates an admin and a volunteer account, a few volunteer tasks, donation
centers, donations and incidents so a fresh install has something to show.
Safe to re-run: existing sample records are left alone.
"""
from datetime import timedelta

from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand, CommandError
from django.db import transaction
from django.utils import timezone

from donations.models import Donation, DonationCenter
from donations.services import create_donation, save_donation_center
from incidents.models import DisasterIncident
from incidents.services import create_incident
from volunteers.models import VolunteerTask
from volunteers.services import create_profile, create_task, get_profile

SAMPLE_USERS = [
    {
        'email': 'admin@daf.org',
        'password': 'admin123',
        'first_name': 'Admin',
        'last_name': 'User',
        'role': 'admin',
    },
    {
        'email': 'volunteer@daf.org',
        'password': 'volunteer123',
        'first_name': 'John',
        'last_name': 'Volunteer',
        'role': 'volunteer',
    },
]

SAMPLE_TASKS = [
    {
        'title': 'Emergency Food Distribution',
        'description': 'Help distribute food packages to families affected by the flood.',
        'category': 'food_distribution',
        'priority': 'high',
        'required_skills': 'food handling, logistics, lifting',
        'location': 'Community Center, Main Street',
        'estimated_hours': 6,
        'max_volunteers': 10,
    },
    {
        'title': 'Medical Support Station',
        'description': 'Staff the first aid tent and assist the on-site medical team.',
        'category': 'emergency_response',
        'priority': 'critical',
        'required_skills': 'first aid, cpr, nursing',
        'location': 'Riverside Park Field Hospital',
        'estimated_hours': 8,
        'max_volunteers': 5,
    },
    {
        'title': 'Shelter Setup',
        'description': 'Set up cots, partitions and supply stations in the temporary shelter.',
        'category': 'shelter_management',
        'priority': 'medium',
        'required_skills': 'construction, lifting',
        'location': 'Lincoln High School Gym',
        'estimated_hours': 5,
        'max_volunteers': 15,
    },
]

SAMPLE_CENTERS = [
    {
        'name': 'Downtown Relief Hub',
        'address': '100 Main Street',
        'city': 'Springfield',
        'state': 'IL',
        'zip_code': '62701',
        'phone': '555-0100',
        'operating_hours': 'Mon-Sat 8am-6pm',
        'accepted_resource_types': 'food, water, clothing, hygiene',
        'capacity': 5000,
    },
    {
        'name': 'Northside Warehouse',
        'address': '42 Industrial Way',
        'city': 'Springfield',
        'state': 'IL',
        'zip_code': '62702',
        'phone': '555-0142',
        'operating_hours': 'Daily 7am-7pm',
        'accepted_resource_types': 'furniture, tools, building supplies',
        'capacity': 20000,
    },
]


class Command(BaseCommand):
    help = 'Load sample users, tasks, centers, donations and incidents'

    @transaction.atomic
    def handle(self, *args, **options):
        users = {sample['role']: self._ensure_user(sample) for sample in SAMPLE_USERS}
        admin = users['admin']
        volunteer = users['volunteer']

        if get_profile(volunteer) is None:
            self._check(create_profile(volunteer, {
                'phone_number': '555-0199',
                'skills': 'First Aid, Logistics, Driving',
                'availability': 'Weekends',
                'has_transportation': True,
                'has_medical_training': True,
            }))

        start = timezone.now() + timedelta(days=2)
        for offset, sample in enumerate(SAMPLE_TASKS):
            if VolunteerTask.objects.filter(title=sample['title']).exists():
                continue
            self._check(create_task(admin, {**sample, 'start_date': start + timedelta(days=offset)}))

        for sample in SAMPLE_CENTERS:
            if DonationCenter.objects.filter(name=sample['name']).exists():
                continue
            self._check(save_donation_center(admin, sample))

        if not Donation.objects.filter(donor=volunteer).exists():
            self._check(create_donation(volunteer, {
                'donation_type': 'financial',
                'amount': '250.00',
                'payment_method': 'credit_card',
                'target_area': 'Springfield flood relief',
            }))
            self._check(create_donation(volunteer, {
                'donation_type': 'resource',
                'urgency_level': 'high',
                'resources': [
                    {'category': 'clothing', 'item_name': 'Winter Jackets', 'quantity': '25', 'unit_of_measure': 'pieces'},
                    {'category': 'food', 'item_name': 'Canned Soup', 'quantity': '120', 'unit_of_measure': 'cans'},
                ],
            }))

        if not DisasterIncident.objects.exists():
            self._check(create_incident(admin, {
                'title': 'River Flooding in Springfield',
                'incident_type': 'flood',
                'description': 'The river crested overnight and flooded the east side neighborhoods.',
                'location': 'East Springfield',
                'incident_date': timezone.now() - timedelta(hours=6),
                'severity': '4',
                'priority': 'high',
                'affected_population': '1200',
            }))

        self.stdout.write(self.style.SUCCESS('Sample data loaded.'))
        for sample in SAMPLE_USERS:
            self.stdout.write(f"  {sample['role']}: {sample['email']} / {sample['password']}")

    def _ensure_user(self, sample):
        User = get_user_model()
        user = User.objects.get_by_email(sample['email'])
        if user is None:
            user = User(
                username=sample['email'],
                email=sample['email'],
                first_name=sample['first_name'],
                last_name=sample['last_name'],
            )
            user.set_password(sample['password'])
        user.role = sample['role']
        if sample['role'] == User.ROLE_ADMIN:
            user.is_staff = True
        user.save()
        return user

    def _check(self, result):
        if not result.ok:
            raise CommandError(f"Could not load sample data: {result.message} {dict(result.errors)}")
        return result.value
