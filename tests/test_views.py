"""
Tests for the home page, the dashboard and the JSON statistics export.
"""
import json
from decimal import Decimal

import pytest
from django.urls import reverse

from core.activity import portal_stats, recent_activity
from core.reports import build_report, serialize_for_json
from donations import services as donation_services
from volunteers import services as volunteer_services


def pledge(user, amount='100'):
    return donation_services.create_donation(user, {
        'donation_type': 'financial',
        'amount': amount,
        'payment_method': 'paypal',
    }).value


@pytest.mark.django_db
class TestHome:

    def test_public(self, client):
        response = client.get(reverse('home'))

        assert response.status_code == 200
        assert response.context['stats']['active_volunteers'] == 0

    def test_logged_in_users_still_see_home(self, client_user):
        assert client_user.get(reverse('home')).status_code == 200


@pytest.mark.django_db
class TestPortalStats:

    def test_counts(self, plain_user, volunteer_profile, make_user):
        pledge(plain_user, '100')
        cancelled = pledge(make_user('late@relief.test'), '40')
        donation_services.update_donation_status(cancelled.pk, 'cancelled', cancelled.donor)

        stats = portal_stats()

        assert stats['active_volunteers'] == 1
        assert stats['total_financial'] == Decimal('100')
        assert stats['active_incidents'] == 0
        assert stats['communities_helped'] == 0

    def test_communities_are_distinct_locations(self, plain_user, volunteer_user):
        for location in ('Shelter A', 'Shelter A', 'Shelter B'):
            donation = donation_services.create_donation(plain_user, {
                'donation_type': 'resource',
                'resources': [{'category': 'food', 'item_name': 'Rice', 'quantity': '5'}],
            }).value
            line = donation.resources.get()
            donation_services.create_distribution(donation.pk, volunteer_user, {
                'distribution_location': location,
                'number_of_recipients': '3',
                'allocations': {line.pk: 5},
            })

        assert portal_stats()['communities_helped'] == 2


@pytest.mark.django_db
class TestRecentActivity:

    def test_mixes_sources_newest_first(self, volunteer_profile, make_task):
        user = volunteer_profile.user
        pledge(user)
        task = make_task()
        volunteer_services.assign_task(volunteer_profile, task.pk)

        items = recent_activity(user)

        assert [item.kind for item in items] == ['assignment', 'donation']
        assert items[0].url == reverse('volunteer_task_detail', args=[task.pk])

    def test_limit(self, plain_user):
        for _ in range(3):
            pledge(plain_user)

        assert len(recent_activity(plain_user, limit=2)) == 2

    def test_other_users_excluded(self, plain_user, volunteer_user):
        pledge(plain_user)
        assert recent_activity(volunteer_user) == []


@pytest.mark.django_db
class TestDashboard:

    def test_requires_login(self, client):
        response = client.get(reverse('dashboard'))
        assert response.status_code == 302

    def test_plain_user_dashboard(self, client_user, plain_user):
        pledge(plain_user)

        response = client_user.get(reverse('dashboard'))

        assert response.status_code == 200
        assert len(response.context['recent_activity']) == 1
        assert 'urgent_donations' not in response.context

    def test_handler_sees_attention_lists(self, client_volunteer, plain_user):
        donation_services.create_donation(plain_user, {
            'donation_type': 'financial',
            'amount': '10',
            'payment_method': 'cash',
            'urgency_level': 'emergency',
        })

        response = client_volunteer.get(reverse('dashboard'))

        assert response.status_code == 200
        assert len(response.context['urgent_donations']) == 1
        assert 'incidents_needing_attention' in response.context


@pytest.mark.django_db
class TestStatisticsExport:

    def test_admin_download(self, client_admin, plain_user):
        pledge(plain_user, '25')

        response = client_admin.get(reverse('statistics_export', args=['donations']))

        assert response.status_code == 200
        assert response['Content-Disposition'] == 'attachment; filename="donations_report.json"'
        payload = json.loads(response.content)
        assert payload['statistics']['total_donations'] == 1
        assert 'generated_at' in payload

    def test_unknown_report(self, client_admin):
        response = client_admin.get(reverse('statistics_export', args=['weather']))
        assert response.status_code == 400

    def test_non_admin_forbidden(self, client_volunteer):
        response = client_volunteer.get(reverse('statistics_export', args=['dashboard']))
        assert response.status_code == 403

    def test_every_report_builds(self, db):
        for report_type in ('dashboard', 'donations', 'incidents', 'volunteers'):
            assert 'generated_at' in build_report(report_type)

    def test_serialize_for_json(self):
        from datetime import date

        data = serialize_for_json({'when': date(2024, 5, 1), 3: [date(2024, 5, 2)]})

        assert data == {'when': '2024-05-01', '3': ['2024-05-02']}
