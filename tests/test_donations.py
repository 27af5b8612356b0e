"""
Tests for the donation ledger: creation, status audit trail, quality checks,
distribution accounting and reports.
"""
from datetime import date, timedelta
from decimal import Decimal

import pytest
from django.urls import reverse
from django.utils import timezone

from core.results import Outcome
from donations import services
from donations.models import (
    Donation,
    DonationDistribution,
    ResourceDistribution,
    ResourceDonation,
)
from donations.reports import DonationReport, month_keys


def financial(amount='50.00', **extra):
    data = {'donation_type': 'financial', 'amount': amount, 'payment_method': 'credit_card'}
    data.update(extra)
    return data


def clothing(quantity=25, **extra):
    data = {
        'donation_type': 'resource',
        'resources': [
            {'category': 'clothing', 'item_name': 'Winter Coats', 'quantity': str(quantity)},
        ],
    }
    data.update(extra)
    return data


@pytest.fixture
def resource_donation(plain_user):
    return services.create_donation(plain_user, clothing()).value


@pytest.mark.django_db
class TestCreateDonation:

    def test_financial_donation_is_confirmed(self, plain_user):
        result = services.create_donation(plain_user, financial('120.50'))

        assert result.ok
        donation = result.value
        assert donation.status == Donation.STATUS_CONFIRMED
        assert donation.amount == Decimal('120.50')
        assert donation.transaction_reference.startswith('TXN')

        entries = list(donation.tracking_history.order_by('id'))
        assert [e.status for e in entries] == ['pledged', 'confirmed']
        assert entries[0].location == services.INITIAL_LOCATION
        assert entries[0].notes == services.INITIAL_NOTES
        assert entries[1].notes.startswith('Status changed from Pledged to Confirmed')

    def test_resource_donation_stays_pledged(self, plain_user):
        result = services.create_donation(plain_user, clothing(25))

        donation = result.value
        assert donation.status == Donation.STATUS_PLEDGED
        lines = list(services.resource_donations_for(donation.pk))
        assert len(lines) == 1
        line = lines[0]
        assert line.quantity == 25
        assert line.remaining_quantity == 25
        assert line.status == ResourceDonation.STATUS_AVAILABLE
        assert donation.tracking_history.count() == 1

    def test_financial_requires_positive_amount(self, plain_user):
        result = services.create_donation(plain_user, financial('0'))

        assert result.outcome is Outcome.VALIDATION
        assert 'amount' in result.errors
        assert not Donation.objects.exists()

    @pytest.mark.parametrize('amount', ['NaN', 'sNaN', 'Infinity', '-inf'])
    def test_non_finite_amount_is_a_field_error(self, plain_user, amount):
        result = services.create_donation(plain_user, financial(amount))

        assert result.outcome is Outcome.VALIDATION
        assert 'amount' in result.errors
        assert not Donation.objects.exists()

    @pytest.mark.parametrize('amount', ['1e20', '10000000000', '12.345'])
    def test_amount_must_fit_the_column(self, plain_user, amount):
        result = services.create_donation(plain_user, financial(amount))

        assert result.outcome is Outcome.VALIDATION
        assert 'amount' in result.errors

    def test_largest_amount_accepted(self, plain_user):
        result = services.create_donation(plain_user, financial('9999999999.99'))
        assert result.ok

    def test_non_finite_item_value_is_a_line_error(self, plain_user):
        data = clothing()
        data['resources'][0]['estimated_value'] = 'NaN'

        result = services.create_donation(plain_user, data)

        assert result.outcome is Outcome.VALIDATION
        assert 'resources-0' in result.errors

    def test_process_financial_donation(self, plain_user, portal_admin):
        donation = Donation.objects.create(donor=plain_user, donation_type='financial', amount=Decimal('40'))

        services.process_financial_donation(donation, 'TXN20240101120000', 'paypal', portal_admin)

        donation.refresh_from_db()
        assert donation.status == Donation.STATUS_CONFIRMED
        assert donation.payment_method == 'paypal'
        assert donation.transaction_reference == 'TXN20240101120000'
        latest = services.latest_tracking(donation.pk)
        assert latest.notes == 'Status changed from Pledged to Confirmed. Payment reference TXN20240101120000'

    def test_lists_by_type(self, plain_user):
        services.create_donation(plain_user, financial())
        services.create_donation(plain_user, clothing())

        assert services.donations_by_type('financial').count() == 1
        assert services.donations_by_type('resource').get().resources.count() == 1
        assert not services.donations_by_type('mixed').exists()

    def test_financial_requires_payment_method(self, plain_user):
        result = services.create_donation(plain_user, financial(payment_method=''))
        assert 'payment_method' in result.errors

    def test_resource_requires_an_item(self, plain_user):
        result = services.create_donation(plain_user, {'donation_type': 'resource', 'resources': []})
        assert 'resources' in result.errors

    def test_bad_quantity_reported_per_line(self, plain_user):
        data = clothing()
        data['resources'][0]['quantity'] = '-3'

        result = services.create_donation(plain_user, data)

        assert 'resources-0' in result.errors
        assert not ResourceDonation.objects.exists()

    def test_pickup_needs_address(self, plain_user):
        result = services.create_donation(plain_user, clothing(requires_pickup='on'))
        assert 'pickup_address' in result.errors

    def test_unknown_type(self, plain_user):
        result = services.create_donation(plain_user, {'donation_type': 'bitcoin'})
        assert 'donation_type' in result.errors


@pytest.mark.django_db
class TestStatusAudit:

    def test_each_change_adds_one_entry(self, resource_donation, portal_admin):
        before = resource_donation.tracking_history.count()

        result = services.update_donation_status(resource_donation.pk, 'received', portal_admin, 'Dock 3')

        assert result.ok
        assert resource_donation.tracking_history.count() == before + 1
        latest = services.latest_tracking(resource_donation.pk)
        assert latest.status == 'received'
        assert latest.notes == 'Status changed from Pledged to Received. Dock 3'
        assert latest.updated_by == portal_admin

    def test_processing_stamps_processor(self, resource_donation, volunteer_user):
        services.process_donation(resource_donation.pk, volunteer_user)

        resource_donation.refresh_from_db()
        assert resource_donation.processed_by == volunteer_user
        assert resource_donation.processed_date is not None

    def test_confirm_then_approve(self, resource_donation, portal_admin):
        assert services.confirm_donation(resource_donation.pk, portal_admin).ok
        assert services.approve_donation(resource_donation.pk, portal_admin).ok

        resource_donation.refresh_from_db()
        assert resource_donation.status == Donation.STATUS_APPROVED
        history = [e.status for e in resource_donation.tracking_history.order_by('id')]
        assert history == ['pledged', 'confirmed', 'approved']

    def test_approve_needs_handler(self, resource_donation, plain_user):
        result = services.approve_donation(resource_donation.pk, plain_user)
        assert result.outcome is Outcome.FORBIDDEN

    def test_same_status_rejected(self, resource_donation, portal_admin):
        result = services.update_donation_status(resource_donation.pk, 'pledged', portal_admin)

        assert result.outcome is Outcome.REJECTED
        assert resource_donation.tracking_history.count() == 1

    def test_terminal_status_is_final(self, resource_donation, portal_admin):
        assert services.update_donation_status(resource_donation.pk, 'completed', portal_admin).ok

        result = services.update_donation_status(resource_donation.pk, 'processing', portal_admin)

        assert result.outcome is Outcome.REJECTED
        resource_donation.refresh_from_db()
        assert resource_donation.status == 'completed'

    def test_plain_user_cannot_advance(self, resource_donation, plain_user):
        result = services.update_donation_status(resource_donation.pk, 'approved', plain_user)
        assert result.outcome is Outcome.FORBIDDEN

    def test_donor_can_cancel_own(self, resource_donation, plain_user):
        result = services.update_donation_status(resource_donation.pk, 'cancelled', plain_user)

        assert result.ok
        assert Donation.objects.get(pk=resource_donation.pk).status == 'cancelled'

    def test_other_user_cannot_cancel(self, resource_donation, make_user):
        stranger = make_user('stranger@relief.test')
        result = services.update_donation_status(resource_donation.pk, 'cancelled', stranger)
        assert result.outcome is Outcome.FORBIDDEN

    def test_unknown_status(self, resource_donation, portal_admin):
        result = services.update_donation_status(resource_donation.pk, 'teleported', portal_admin)
        assert result.outcome is Outcome.VALIDATION

    def test_missing_donation(self, portal_admin):
        result = services.update_donation_status(9999, 'received', portal_admin)
        assert result.outcome is Outcome.NOT_FOUND

    def test_reject_requires_reason(self, resource_donation, portal_admin):
        assert services.reject_donation(resource_donation.pk, '  ', portal_admin).outcome is Outcome.VALIDATION

        result = services.reject_donation(resource_donation.pk, 'Items are damaged', portal_admin)

        assert result.ok
        assert result.value.status == 'rejected'
        assert 'Items are damaged' in services.latest_tracking(resource_donation.pk).notes

    def test_manual_tracking_keeps_status(self, resource_donation, volunteer_user):
        result = services.add_tracking_update(
            resource_donation.pk, volunteer_user, location='Route 9', notes='Truck departed'
        )

        assert result.ok
        assert result.value.status == 'pledged'
        assert resource_donation.tracking_history.count() == 2

    def test_manual_tracking_needs_handler(self, resource_donation, plain_user):
        result = services.add_tracking_update(resource_donation.pk, plain_user, notes='hi')
        assert result.outcome is Outcome.FORBIDDEN


@pytest.mark.django_db
class TestAddResourceLine:

    def line(self, **overrides):
        data = {'category': 'personal_hygiene', 'item_name': 'Soap', 'quantity': '40'}
        data.update(overrides)
        return data

    def test_donor_adds_line(self, resource_donation, plain_user):
        result = services.add_resource_donation(resource_donation.pk, plain_user, self.line())

        assert result.ok
        assert result.value.remaining_quantity == 40
        assert result.value.status == ResourceDonation.STATUS_AVAILABLE
        names = sorted(r.item_name for r in services.resource_donations_for(resource_donation.pk))
        assert names == ['Soap', 'Winter Coats']

    def test_handler_adds_line(self, resource_donation, volunteer_user):
        assert services.add_resource_donation(resource_donation.pk, volunteer_user, self.line()).ok

    def test_stranger_forbidden(self, resource_donation, make_user):
        stranger = make_user('stranger@relief.test')

        result = services.add_resource_donation(resource_donation.pk, stranger, self.line())

        assert result.outcome is Outcome.FORBIDDEN

    def test_financial_donation_rejected(self, plain_user):
        donation = services.create_donation(plain_user, financial()).value

        result = services.add_resource_donation(donation.pk, plain_user, self.line())

        assert result.outcome is Outcome.REJECTED

    def test_closed_donation_rejected(self, resource_donation, plain_user):
        services.update_donation_status(resource_donation.pk, 'cancelled', plain_user)

        result = services.add_resource_donation(resource_donation.pk, plain_user, self.line())

        assert result.outcome is Outcome.REJECTED
        assert services.resource_donations_for(resource_donation.pk).count() == 1

    def test_invalid_line(self, resource_donation, plain_user):
        result = services.add_resource_donation(resource_donation.pk, plain_user, self.line(quantity='0'))

        assert result.outcome is Outcome.VALIDATION
        assert services.resource_donations_for(resource_donation.pk).count() == 1

    def test_missing_donation(self, plain_user):
        result = services.add_resource_donation(999, plain_user, self.line())
        assert result.outcome is Outcome.NOT_FOUND


@pytest.mark.django_db
class TestQualityCheck:

    def test_plain_user_forbidden(self, resource_donation, plain_user):
        line = resource_donation.resources.get()

        result = services.perform_quality_check(line.pk, plain_user, approved=True)

        assert result.outcome is Outcome.FORBIDDEN
        line.refresh_from_db()
        assert line.quality_check_date is None

    def test_approve_and_reject(self, resource_donation, volunteer_user):
        line = resource_donation.resources.get()

        approved = services.perform_quality_check(line.pk, volunteer_user, True, 'Clean')
        assert approved.value.status == ResourceDonation.STATUS_AVAILABLE
        assert approved.value.quality_checked_by == volunteer_user

        rejected = services.perform_quality_check(line.pk, volunteer_user, False, 'Mould')
        assert rejected.value.status == ResourceDonation.STATUS_REJECTED
        assert rejected.value.quality_notes == 'Mould'

    def test_pending_check_listing(self, resource_donation, volunteer_user):
        line = resource_donation.resources.get()
        assert list(services.resources_pending_quality_check()) == [line]

        services.perform_quality_check(line.pk, volunteer_user, True)

        assert not services.resources_pending_quality_check().exists()


@pytest.mark.django_db
class TestDistribution:

    def distribute(self, donation, user, quantity, location='Shelter A'):
        line = donation.resources.get()
        return services.create_distribution(donation.pk, user, {
            'distribution_location': location,
            'number_of_recipients': '5',
            'allocations': {str(line.pk): str(quantity)},
        })

    def test_partial_then_full(self, resource_donation, volunteer_user):
        first = self.distribute(resource_donation, volunteer_user, 10)

        assert first.ok
        line = resource_donation.resources.get()
        assert line.remaining_quantity == 15
        assert line.status == ResourceDonation.STATUS_AVAILABLE
        resource_donation.refresh_from_db()
        assert resource_donation.status == Donation.STATUS_DISTRIBUTED
        assert resource_donation.distributed_by == volunteer_user

        second = self.distribute(resource_donation, volunteer_user, 15, location='Shelter B')

        assert second.ok
        line.refresh_from_db()
        assert line.remaining_quantity == 0
        assert line.status == ResourceDonation.STATUS_DISTRIBUTED
        assert DonationDistribution.objects.filter(donation=resource_donation).count() == 2
        assert ResourceDistribution.objects.filter(resource=line).count() == 2
        # The second hand-out does not log another status change
        assert resource_donation.tracking_history.filter(status='distributed').count() == 1

    def test_over_allocation_saves_nothing(self, resource_donation, volunteer_user):
        result = self.distribute(resource_donation, volunteer_user, 26)

        line = resource_donation.resources.get()
        assert result.outcome is Outcome.VALIDATION
        assert result.errors[f'resource-{line.pk}'] == ['Only 25 of Winter Coats remaining.']
        assert line.remaining_quantity == 25
        assert not DonationDistribution.objects.exists()
        resource_donation.refresh_from_db()
        assert resource_donation.status == Donation.STATUS_PLEDGED

    def test_plain_user_forbidden(self, resource_donation, plain_user):
        result = self.distribute(resource_donation, plain_user, 5)

        assert result.outcome is Outcome.FORBIDDEN
        assert not DonationDistribution.objects.exists()

    def test_requires_location_and_recipients(self, resource_donation, volunteer_user):
        result = services.create_distribution(resource_donation.pk, volunteer_user, {
            'distribution_location': '',
            'number_of_recipients': '0',
            'allocations': {},
        })
        assert set(result.errors) >= {'distribution_location', 'number_of_recipients'}

    def test_cancelled_donation_cannot_be_distributed(self, resource_donation, plain_user, volunteer_user):
        services.update_donation_status(resource_donation.pk, 'cancelled', plain_user)

        result = self.distribute(resource_donation, volunteer_user, 5)

        assert result.outcome is Outcome.REJECTED

    def test_rejected_line_not_distributable(self, resource_donation, volunteer_user):
        line = resource_donation.resources.get()
        services.perform_quality_check(line.pk, volunteer_user, False)

        result = self.distribute(resource_donation, volunteer_user, 5)

        assert f'resource-{line.pk}' in result.errors


@pytest.mark.django_db
class TestReceiptsAndDeletion:

    def test_tax_receipt_text(self, plain_user):
        donation = services.create_donation(plain_user, financial('75')).value

        result = services.generate_tax_receipt(donation.pk, plain_user)

        today = timezone.localdate().strftime('%Y-%m-%d')
        assert result.value == f"Tax Receipt #{donation.pk} - $75.00 - Generated on {today}"

    def test_receipt_only_for_donor(self, plain_user, portal_admin):
        donation = services.create_donation(plain_user, financial()).value
        assert services.generate_tax_receipt(donation.pk, portal_admin).outcome is Outcome.FORBIDDEN

    def test_receipt_needs_amount(self, resource_donation, plain_user):
        assert services.generate_tax_receipt(resource_donation.pk, plain_user).outcome is Outcome.REJECTED

    def test_donor_deletes_pledge_only(self, plain_user):
        pledged = services.create_donation(plain_user, clothing()).value
        confirmed = services.create_donation(plain_user, financial()).value

        assert services.delete_donation(pledged.pk, plain_user).ok
        assert services.delete_donation(confirmed.pk, plain_user).outcome is Outcome.FORBIDDEN
        assert list(Donation.objects.all()) == [confirmed]

    def test_admin_deletes_anything(self, plain_user, portal_admin):
        confirmed = services.create_donation(plain_user, financial()).value
        assert services.delete_donation(confirmed.pk, portal_admin).ok


@pytest.mark.django_db
class TestDonationCenters:

    def test_admin_only(self, volunteer_user):
        result = services.save_donation_center(volunteer_user, {'name': 'Hub', 'address': '1 Main', 'city': 'Town'})
        assert result.outcome is Outcome.FORBIDDEN

    def test_create_and_update(self, portal_admin):
        created = services.save_donation_center(portal_admin, {
            'name': 'Hub', 'address': '1 Main', 'city': 'Town', 'capacity': '300',
        })
        assert created.ok
        assert created.value.capacity == 300

        updated = services.save_donation_center(
            portal_admin,
            {'name': 'Hub East', 'address': '1 Main', 'city': 'Town'},
            center_id=created.value.pk,
        )
        assert updated.value.name == 'Hub East'

    def test_required_fields(self, portal_admin):
        result = services.save_donation_center(portal_admin, {})
        assert set(result.errors) == {'name', 'address', 'city'}


@pytest.mark.django_db
class TestDonationReport:

    def test_statistics(self, plain_user, make_user):
        services.create_donation(plain_user, financial('100'))
        services.create_donation(plain_user, financial('50'))
        services.create_donation(make_user('other@relief.test'), clothing())

        stats = DonationReport().statistics()

        assert stats['total_donations'] == 3
        assert stats['total_financial_amount'] == Decimal('150')
        assert stats['total_resource_items'] == 1
        assert stats['unique_donors'] == 2
        assert stats['active_donations'] == 2
        assert stats['donations_by_status'] == {'confirmed': 2, 'pledged': 1}
        assert stats['donations_by_category'] == {'clothing': 1}
        assert stats['average_donation_amount'] == Decimal('75.00')

    def test_empty_statistics(self, db):
        stats = DonationReport().statistics()
        assert stats['total_donations'] == 0
        assert stats['average_donation_amount'] == Decimal('0.00')

    def test_monthly_trends_cover_every_month(self, plain_user):
        services.create_donation(plain_user, financial('40'))

        trends = DonationReport().monthly_trends(6)

        assert list(trends) == month_keys(6)
        assert trends[month_keys(1)[0]] == Decimal('40')
        assert sum(trends.values()) == Decimal('40')

    def test_month_keys_wrap_year(self):
        assert month_keys(3, today=date(2024, 2, 15)) == ['2023-12', '2024-01', '2024-02']

    def test_analytics_completion_rate(self, resource_donation, plain_user, volunteer_user):
        services.create_donation(plain_user, financial())
        services.update_donation_status(resource_donation.pk, 'distributed', volunteer_user)

        analytics = DonationReport().analytics()

        assert analytics['total_donations'] == 2
        assert analytics['completed_donations'] == 1
        assert analytics['completion_rate'] == 50.0


@pytest.mark.django_db
class TestDonationViews:

    def test_donate_form_posts_resource_lines(self, client_user, plain_user):
        response = client_user.post(reverse('donate'), {
            'donation_type': 'resource',
            'resource_category': ['food', 'medical'],
            'resource_item_name': ['Rice', 'Bandages'],
            'resource_quantity': ['10', '48'],
        })

        donation = Donation.objects.get(donor=plain_user)
        assert response.status_code == 302
        assert response['Location'] == reverse('donation_detail', args=[donation.pk])
        assert sorted(donation.resources.values_list('item_name', flat=True)) == ['Bandages', 'Rice']

    def test_donate_form_shows_errors(self, client_user):
        response = client_user.post(reverse('donate'), {'donation_type': 'financial', 'amount': ''})

        assert response.status_code == 200
        assert b'Please enter a valid donation amount.' in response.content

    def test_detail_hidden_from_strangers(self, resource_donation, make_user):
        from django.test import Client

        stranger = Client()
        stranger.force_login(make_user('stranger@relief.test'))

        response = stranger.get(reverse('donation_detail', args=[resource_donation.pk]))

        assert response.status_code == 403

    def test_detail_visible_to_donor(self, resource_donation, client_user):
        response = client_user.get(reverse('donation_detail', args=[resource_donation.pk]))

        assert response.status_code == 200
        assert b'Winter Coats' in response.content

    def test_missing_detail(self, client_user):
        response = client_user.get(reverse('donation_detail', args=[9999]))
        assert response.status_code == 404

    def test_status_post_forbidden_for_plain_user(self, resource_donation, client_user):
        response = client_user.post(
            reverse('donation_update_status', args=[resource_donation.pk]), {'status': 'approved'}
        )
        assert response.status_code == 403

    def test_status_post_by_volunteer(self, resource_donation, client_volunteer):
        response = client_volunteer.post(
            reverse('donation_update_status', args=[resource_donation.pk]), {'status': 'received'}
        )

        assert response.status_code == 302
        assert Donation.objects.get(pk=resource_donation.pk).status == 'received'

    def test_distribute_view(self, resource_donation, client_volunteer):
        line = resource_donation.resources.get()

        response = client_volunteer.post(reverse('donation_distribute', args=[resource_donation.pk]), {
            'distribution_location': 'Gym',
            'number_of_recipients': '12',
            f'quantity_{line.pk}': '25',
        })

        assert response.status_code == 302
        line.refresh_from_db()
        assert line.status == ResourceDonation.STATUS_DISTRIBUTED

    def test_add_resource_view(self, resource_donation, client_user):
        response = client_user.post(reverse('donation_add_resource', args=[resource_donation.pk]), {
            'category': 'food',
            'item_name': 'Canned Beans',
            'quantity': '12',
            'condition': 'new',
        })

        assert response.status_code == 302
        assert response.url == reverse('donation_detail', args=[resource_donation.pk])
        added = services.resource_donations_for(resource_donation.pk).get(item_name='Canned Beans')
        assert added.remaining_quantity == 12

    def test_add_resource_view_forbidden_for_stranger(self, resource_donation, make_user):
        from django.test import Client

        stranger = Client()
        stranger.force_login(make_user('stranger@relief.test'))

        response = stranger.post(reverse('donation_add_resource', args=[resource_donation.pk]), {
            'category': 'food', 'item_name': 'Rice', 'quantity': '1',
        })

        assert response.status_code == 403

    def test_detail_offers_add_item_form(self, resource_donation, client_user):
        response = client_user.get(reverse('donation_detail', args=[resource_donation.pk]))
        assert reverse('donation_add_resource', args=[resource_donation.pk]).encode() in response.content

    def test_distribute_view_forbidden_for_plain_user(self, resource_donation, client_user):
        response = client_user.get(reverse('donation_distribute', args=[resource_donation.pk]))
        assert response.status_code == 403

    def test_quality_check_htmx_returns_row(self, resource_donation, client_volunteer):
        line = resource_donation.resources.get()

        response = client_volunteer.post(
            reverse('resource_quality_check', args=[line.pk]),
            {'decision': 'reject', 'notes': 'Torn'},
            HTTP_HX_REQUEST='true',
        )

        assert response.status_code == 200
        assert b'Winter Coats' in response.content
        line.refresh_from_db()
        assert line.status == ResourceDonation.STATUS_REJECTED

    def test_tax_receipt_view(self, client_user, plain_user):
        donation = services.create_donation(plain_user, financial('20')).value

        response = client_user.get(reverse('donation_tax_receipt', args=[donation.pk]))

        assert response.status_code == 200
        assert response['Content-Type'].startswith('text/plain')
        assert b'$20.00' in response.content

    def test_search_limited_to_own_donations(self, resource_donation, make_user, client_volunteer):
        other = make_user('other@relief.test')
        services.create_donation(other, clothing(3))
        from django.test import Client

        donor_client = Client()
        donor_client.force_login(other)

        mine = donor_client.get(reverse('donation_search'))
        everyone = client_volunteer.get(reverse('donation_search'))

        assert len(mine.context['donations']) == 1
        assert len(everyone.context['donations']) == 2

    def test_dashboard_and_statistics_render(self, client_user, resource_donation):
        assert client_user.get(reverse('donation_dashboard')).status_code == 200
        assert client_user.get(reverse('donation_statistics')).status_code == 200

    def test_expiring_resources(self, plain_user):
        data = clothing()
        data['resources'][0].update({
            'category': 'food',
            'item_name': 'Milk',
            'expiration_date': (timezone.localdate() + timedelta(days=3)).isoformat(),
        })
        services.create_donation(plain_user, data)

        assert [r.item_name for r in services.expiring_resources()] == ['Milk']
