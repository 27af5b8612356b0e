"""
Tests for the incident registry: reporting, verification, permissions and the
update log.
"""
from datetime import timedelta

import pytest
from django.test import Client
from django.urls import reverse
from django.utils import timezone

from core.results import Outcome
from incidents import services
from incidents.models import DisasterIncident, IncidentMedia, IncidentUpdate
from incidents.reports import IncidentReport


def incident_data(**overrides):
    data = {
        'title': 'Bridge collapse on Route 4',
        'incident_type': 'flood',
        'description': 'Flood water undermined the bridge supports.',
        'location': 'Route 4, Millbrook',
        'incident_date': (timezone.localtime() - timedelta(hours=2)).strftime('%Y-%m-%dT%H:%M'),
        'severity': '3',
        'affected_population': '150',
    }
    data.update(overrides)
    return data


@pytest.fixture
def incident(plain_user):
    return services.create_incident(plain_user, incident_data()).value


def update_texts(incident):
    return list(
        IncidentUpdate.objects.filter(incident=incident).order_by('id').values_list('update_text', flat=True)
    )


@pytest.mark.django_db
class TestReportIncident:

    def test_create_logs_initial_update(self, plain_user):
        result = services.create_incident(plain_user, incident_data())

        assert result.ok
        incident = result.value
        assert incident.status == DisasterIncident.STATUS_REPORTED
        assert incident.verification_status == DisasterIncident.VERIFICATION_PENDING
        assert incident.severity == 3
        assert incident.affected_population == 150
        assert update_texts(incident) == [services.INITIAL_UPDATE]

    def test_future_date_rejected(self, plain_user):
        future = (timezone.localtime() + timedelta(days=1)).strftime('%Y-%m-%dT%H:%M')

        result = services.create_incident(plain_user, incident_data(incident_date=future))

        assert result.errors['incident_date'] == ['Incident date cannot be in the future.']
        assert not DisasterIncident.objects.exists()

    def test_required_fields(self, plain_user):
        result = services.create_incident(plain_user, {})

        assert result.outcome is Outcome.VALIDATION
        assert {'title', 'description', 'location', 'incident_type', 'incident_date'} <= set(result.errors)

    def test_coordinates_checked(self, plain_user):
        result = services.create_incident(plain_user, incident_data(latitude='95', longitude='-200'))
        assert set(result.errors) == {'latitude', 'longitude'}

    def test_non_finite_numbers_are_field_errors(self, plain_user):
        result = services.create_incident(plain_user, incident_data(
            latitude='NaN', longitude='Infinity', property_damage_estimate='sNaN',
        ))

        assert result.outcome is Outcome.VALIDATION
        assert {'latitude', 'longitude', 'property_damage_estimate'} <= set(result.errors)
        assert not DisasterIncident.objects.exists()

    def test_coordinates_limited_to_column_precision(self, plain_user):
        result = services.create_incident(plain_user, incident_data(latitude='40.12345678'))
        assert 'latitude' in result.errors

        result = services.create_incident(plain_user, incident_data(latitude='40.123456', longitude='-74.006'))
        assert result.ok

    def test_negative_counts_rejected(self, plain_user):
        result = services.create_incident(plain_user, incident_data(casualties='-1'))
        assert 'casualties' in result.errors

    def test_bad_severity(self, plain_user):
        result = services.create_incident(plain_user, incident_data(severity='9'))
        assert 'severity' in result.errors


@pytest.mark.django_db
class TestIncidentTransitions:

    def test_verified_forces_status(self, incident, volunteer_user):
        result = services.verify_incident(incident.pk, 'verified', volunteer_user)

        assert result.ok
        incident.refresh_from_db()
        assert incident.verification_status == 'verified'
        assert incident.status == DisasterIncident.STATUS_VERIFIED
        assert incident.verified_by == volunteer_user
        assert update_texts(incident)[-1] == 'Incident verification status: Verified'

    def test_other_verification_keeps_status(self, incident, volunteer_user):
        services.verify_incident(incident.pk, 'requires_more_info', volunteer_user)

        incident.refresh_from_db()
        assert incident.status == DisasterIncident.STATUS_REPORTED
        assert incident.verification_status == 'requires_more_info'

    def test_plain_user_cannot_verify(self, incident, make_user):
        other = make_user('bystander@relief.test')
        assert services.verify_incident(incident.pk, 'verified', other).outcome is Outcome.FORBIDDEN

    def test_status_change_logged(self, incident, plain_user):
        result = services.update_incident_status(incident.pk, 'response_in_progress', plain_user)

        assert result.ok
        assert update_texts(incident)[-1] == 'Status changed from Reported to Response In Progress'
        latest = IncidentUpdate.objects.filter(incident=incident).order_by('-id').first()
        assert latest.update_type == IncidentUpdate.TYPE_STATUS_CHANGE

    def test_same_status_rejected(self, incident, plain_user):
        result = services.update_incident_status(incident.pk, 'reported', plain_user)

        assert result.outcome is Outcome.REJECTED
        assert len(update_texts(incident)) == 1

    def test_stranger_cannot_change_status(self, incident, make_user):
        other = make_user('bystander@relief.test')
        result = services.update_incident_status(incident.pk, 'resolved', other)
        assert result.outcome is Outcome.FORBIDDEN

    def test_priority_change(self, incident, portal_admin):
        result = services.set_priority(incident.pk, 'critical', portal_admin)

        assert result.ok
        assert update_texts(incident)[-1] == 'Priority changed from Medium to Critical'
        latest = IncidentUpdate.objects.filter(incident=incident).order_by('-id').first()
        assert latest.is_critical

    def test_assign_admin_only(self, incident, portal_admin, volunteer_user):
        assert services.assign_incident(incident.pk, volunteer_user.pk, volunteer_user).outcome is Outcome.FORBIDDEN

        result = services.assign_incident(incident.pk, volunteer_user.pk, portal_admin)

        assert result.ok
        incident.refresh_from_db()
        assert incident.assigned_to == volunteer_user
        assert update_texts(incident)[-1] == 'Incident assigned to Val Helper'

    def test_assign_unknown_user(self, incident, portal_admin):
        result = services.assign_incident(incident.pk, 9999, portal_admin)
        assert 'assigned_to' in result.errors

    def test_assignee_can_edit(self, incident, portal_admin, volunteer_user):
        services.assign_incident(incident.pk, volunteer_user.pk, portal_admin)

        result = services.update_incident(incident.pk, volunteer_user, incident_data(title='Bridge closed'))

        assert result.ok
        assert result.value.title == 'Bridge closed'
        assert update_texts(incident)[-1] == services.DETAILS_UPDATED


@pytest.mark.django_db
class TestIncidentPermissions:

    def test_only_reporter_or_assignee_edits(self, incident, portal_admin):
        result = services.update_incident(incident.pk, portal_admin, incident_data(title='Changed'))

        assert result.outcome is Outcome.FORBIDDEN
        incident.refresh_from_db()
        assert incident.title == 'Bridge collapse on Route 4'

    def test_edit_ignores_priority(self, incident, plain_user):
        services.update_incident(incident.pk, plain_user, incident_data(priority='emergency'))

        incident.refresh_from_db()
        assert incident.priority == 'medium'

    def test_delete_by_reporter(self, incident, plain_user):
        assert services.delete_incident(incident.pk, plain_user).ok
        assert not DisasterIncident.objects.exists()

    def test_delete_by_admin(self, incident, portal_admin):
        assert services.delete_incident(incident.pk, portal_admin).ok

    def test_delete_by_volunteer_forbidden(self, incident, volunteer_user):
        assert services.delete_incident(incident.pk, volunteer_user).outcome is Outcome.FORBIDDEN

    def test_export_admin_only(self, incident, plain_user, portal_admin):
        assert services.generate_incident_report(incident.pk, plain_user).outcome is Outcome.FORBIDDEN

        result = services.generate_incident_report(incident.pk, portal_admin)

        today = timezone.localdate().strftime('%Y-%m-%d')
        assert result.value == f"Incident Report #{incident.pk} - Bridge collapse on Route 4 - Generated on {today}"


@pytest.mark.django_db
class TestChildRecords:

    def test_resource_request(self, incident, plain_user):
        result = services.add_resource_request(incident.pk, plain_user, {
            'resource_type': 'water',
            'description': 'Bottled water for 150 people',
            'quantity_needed': '300',
            'priority': 'critical',
        })

        assert result.ok
        assert list(services.urgent_resource_requests()) == [result.value]

    def test_response_needs_handler(self, incident, plain_user, volunteer_user):
        data = {'response_type': 'evacuation', 'description': 'Moved residents to high ground'}

        assert services.add_response(incident.pk, plain_user, data).outcome is Outcome.FORBIDDEN
        assert services.add_response(incident.pk, volunteer_user, data).ok
        assert services.active_responses().count() == 1

    def test_response_cost_must_be_finite(self, incident, volunteer_user):
        result = services.add_response(incident.pk, volunteer_user, {
            'response_type': 'evacuation',
            'description': 'Buses to the school gym',
            'cost': 'NaN',
        })

        assert result.outcome is Outcome.VALIDATION
        assert 'cost' in result.errors

    def test_media_metadata(self, incident, plain_user):
        result = services.add_media(incident.pk, plain_user, {
            'file_name': 'bridge.jpg',
            'file_path': 'incidents/2024/bridge.jpg',
            'media_type': 'image',
            'file_size': '2048',
        })

        assert result.ok
        assert result.value.file_size == 2048

    def test_delete_child_permissions(self, incident, plain_user, volunteer_user):
        media = services.add_media(incident.pk, plain_user, {'file_name': 'a.jpg', 'file_path': 'a.jpg'}).value

        assert services.delete_child('media', media.pk, volunteer_user).outcome is Outcome.FORBIDDEN
        assert services.delete_child('media', media.pk, plain_user).ok
        assert not IncidentMedia.objects.exists()

    def test_delete_child_unknown_kind(self, plain_user):
        assert services.delete_child('photo', 1, plain_user).outcome is Outcome.NOT_FOUND

    def test_post_update_requires_text(self, incident, plain_user):
        assert services.post_update(incident.pk, plain_user, '   ').outcome is Outcome.VALIDATION
        assert services.post_update(incident.pk, plain_user, 'Water receding', is_critical='on').value.is_critical


@pytest.mark.django_db
class TestIncidentQueries:

    def test_search(self, plain_user):
        services.create_incident(plain_user, incident_data())
        services.create_incident(plain_user, incident_data(
            title='Forest fire', incident_type='wildfire', location='Pine Ridge',
            description='Fire spreading east.',
        ))

        assert [i.title for i in services.search_incidents(term='fire')] == ['Forest fire']
        assert services.search_incidents(incident_type='flood').count() == 1
        assert services.search_incidents(location='ridge').count() == 1
        assert services.search_incidents(severity=3).count() == 2

    def test_lists_by_status_and_assignee(self, incident, portal_admin, volunteer_user):
        assert list(services.incidents_by_status(DisasterIncident.STATUS_REPORTED)) == [incident]
        assert not services.incidents_assigned_to(volunteer_user).exists()

        services.assign_incident(incident.pk, volunteer_user.pk, portal_admin)
        services.update_incident_status(incident.pk, DisasterIncident.STATUS_RESOLVED, volunteer_user)

        assert list(services.incidents_assigned_to(volunteer_user)) == [incident]
        assert not services.incidents_by_status(DisasterIncident.STATUS_REPORTED).exists()
        assert services.incidents_by_status(DisasterIncident.STATUS_RESOLVED).count() == 1

    def test_requiring_attention(self, incident, volunteer_user):
        assert incident in services.incidents_requiring_attention()

        services.verify_incident(incident.pk, 'verified', volunteer_user)

        assert incident not in services.incidents_requiring_attention()

    def test_statistics(self, incident, volunteer_user):
        services.verify_incident(incident.pk, 'verified', volunteer_user)

        stats = IncidentReport().statistics()
        analytics = IncidentReport().analytics()

        assert stats['total_incidents'] == 1
        assert stats['active_incidents'] == 1
        assert stats['total_people_affected'] == 150
        assert stats['incidents_by_type'] == {'Flood': 1}
        assert analytics['most_common_type'] == 'Flood'
        assert analytics['verification_rate'] == 100.0


@pytest.mark.django_db
class TestIncidentViews:

    def test_report_view_creates(self, client_user):
        response = client_user.post(reverse('incident_report'), incident_data())

        incident = DisasterIncident.objects.get()
        assert response.status_code == 302
        assert response['Location'] == reverse('incident_detail', args=[incident.pk])

    def test_report_view_shows_errors(self, client_user):
        response = client_user.post(reverse('incident_report'), incident_data(title=''))

        assert response.status_code == 200
        assert b'Title is required.' in response.content

    def test_detail_and_missing(self, client_user, incident):
        assert client_user.get(reverse('incident_detail', args=[incident.pk])).status_code == 200
        assert client_user.get(reverse('incident_detail', args=[9999])).status_code == 404

    def test_edit_forbidden_for_non_editor(self, client_volunteer, incident):
        assert client_volunteer.get(reverse('incident_edit', args=[incident.pk])).status_code == 403

    def test_edit_form_prefilled(self, client_user, incident):
        response = client_user.get(reverse('incident_edit', args=[incident.pk]))

        assert response.status_code == 200
        assert response.context['data']['title'] == incident.title

    def test_status_htmx_returns_updates(self, client_user, incident):
        response = client_user.post(
            reverse('incident_update_status', args=[incident.pk]),
            {'status': 'resolved'},
            HTTP_HX_REQUEST='true',
        )

        assert response.status_code == 200
        assert b'Status changed from Reported to Resolved' in response.content

    def test_verify_forbidden_for_plain_user(self, incident, make_user):
        client = Client()
        client.force_login(make_user('bystander@relief.test'))

        response = client.post(reverse('incident_verify', args=[incident.pk]), {'verification_status': 'verified'})

        assert response.status_code == 403

    def test_export_view(self, client_admin, client_user, incident):
        assert client_user.get(reverse('incident_export', args=[incident.pk])).status_code == 403

        response = client_admin.get(reverse('incident_export', args=[incident.pk]))

        assert response.status_code == 200
        assert response.content.startswith(f"Incident Report #{incident.pk}".encode())

    def test_dashboard_search_statistics_render(self, client_user, incident):
        assert client_user.get(reverse('incident_dashboard')).status_code == 200
        assert client_user.get(reverse('incident_search'), {'q': 'bridge'}).status_code == 200
        assert client_user.get(reverse('incident_statistics')).status_code == 200

    @pytest.mark.parametrize('params', [
        {'severity': 'abc'},
        {'severity': '99'},
        {'type': 'meteor', 'status': 'lost', 'priority': 'whenever'},
    ])
    def test_search_ignores_unknown_filters(self, client_user, incident, params):
        response = client_user.get(reverse('incident_search'), params)

        assert response.status_code == 200
        assert list(response.context['incidents']) == [incident]

    def test_search_by_severity(self, client_user, incident):
        assert len(client_user.get(reverse('incident_search'), {'severity': '3'}).context['incidents']) == 1
        assert len(client_user.get(reverse('incident_search'), {'severity': '5'}).context['incidents']) == 0

    def test_dashboard_lists_assigned_incidents(self, client_volunteer, incident, portal_admin, volunteer_user):
        services.assign_incident(incident.pk, volunteer_user.pk, portal_admin)
        services.update_incident_status(incident.pk, DisasterIncident.STATUS_RESPONSE_IN_PROGRESS, volunteer_user)

        response = client_volunteer.get(reverse('incident_dashboard'))

        assert list(response.context['assigned_to_me']) == [incident]
        assert list(response.context['responses_underway']) == [incident]
