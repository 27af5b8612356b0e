"""
Donation ledger operations.

Every status change goes through ``_apply_status`` so it always leaves exactly
one DonationTracking entry that names the old and new status.
"""
import logging
from datetime import timedelta

from django.db import transaction
from django.db.models import Q
from django.utils import timezone

from core.parsing import (
    clean, parse_bool, parse_choice, parse_date, parse_datetime, parse_decimal, parse_int,
)
from core.results import FieldErrors, ServiceResult, service_boundary

from .models import (
    Donation,
    DonationCenter,
    DonationDistribution,
    DonationTracking,
    ResourceDistribution,
    ResourceDonation,
)

logger = logging.getLogger(__name__)

INITIAL_LOCATION = 'Initial donation pledge'
INITIAL_NOTES = 'Donation created and logged in system'
EXPIRING_WITHIN_DAYS = 7


# =============================================================================
# Tracking helpers
# =============================================================================

def add_tracking_entry(donation, status, notes, user=None, location='', estimated_delivery=None):
    return DonationTracking.objects.create(
        donation=donation,
        status=status,
        status_date=timezone.now(),
        location=location,
        notes=notes,
        updated_by=user,
        estimated_delivery=estimated_delivery,
    )


def status_change_note(old_status, new_status):
    return (
        f"Status changed from {Donation.status_label(old_status)} "
        f"to {Donation.status_label(new_status)}"
    )


def _apply_status(donation, new_status, user, detail=''):
    """Set the status, stamp side-effect fields and append one tracking entry."""
    old_status = donation.status
    now = timezone.now()
    donation.status = new_status

    if new_status == Donation.STATUS_PROCESSING:
        donation.processed_date = now
        donation.processed_by = user
    elif new_status == Donation.STATUS_DISTRIBUTED:
        donation.distribution_date = now
        donation.distributed_by = user

    donation.save()

    notes = status_change_note(old_status, new_status)
    if detail:
        notes = f"{notes}. {detail}"
    add_tracking_entry(donation, new_status, notes, user=user)

    logger.info(f"Donation {donation.pk}: {old_status} -> {new_status}")
    return donation


# =============================================================================
# Creation
# =============================================================================

def _clean_resource_lines(raw_lines, errors):
    lines = []
    for index, raw in enumerate(raw_lines or []):
        item_name = clean(raw.get('item_name'))
        quantity_raw = clean(raw.get('quantity'))
        if not item_name and not quantity_raw:
            continue

        key = f'resources-{index}'
        if not item_name:
            errors.add(key, 'Item name is required.')
            continue
        try:
            quantity = parse_int(quantity_raw)
        except ValueError:
            quantity = None
        if not quantity or quantity <= 0:
            errors.add(key, f'Quantity for "{item_name}" must be at least 1.')
            continue

        category = parse_choice(raw.get('category'), ResourceDonation.CATEGORY_CHOICES)
        if not category:
            errors.add(key, f'Please choose a category for "{item_name}".')
            continue

        try:
            estimated_value = parse_decimal(raw.get('estimated_value'), 10, 2)
            expiration_date = parse_date(raw.get('expiration_date'))
        except ValueError:
            errors.add(key, f'Check the value and expiration date for "{item_name}".')
            continue

        lines.append({
            'category': category,
            'item_name': item_name,
            'description': clean(raw.get('description')),
            'quantity': quantity,
            'unit_of_measure': clean(raw.get('unit_of_measure')),
            'estimated_value': estimated_value,
            'condition': parse_choice(raw.get('condition'), ResourceDonation.CONDITION_CHOICES, 'good'),
            'expiration_date': expiration_date,
            'brand': clean(raw.get('brand')),
            'size': clean(raw.get('size')),
            'weight': clean(raw.get('weight')),
            'storage_requirements': clean(raw.get('storage_requirements')),
            'allergen_info': clean(raw.get('allergen_info')),
        })
    return lines


def validate_donation(data):
    """
    Validate a submitted donation form.

    Returns:
        (cleaned, errors) where cleaned holds typed values ready for the model.
    """
    errors = FieldErrors()
    cleaned = {}

    donation_type = parse_choice(data.get('donation_type'), Donation.TYPE_CHOICES)
    if not donation_type:
        errors.add('donation_type', 'Please choose a donation type.')
        return cleaned, errors
    cleaned['donation_type'] = donation_type

    if donation_type in (Donation.TYPE_FINANCIAL, Donation.TYPE_MIXED):
        try:
            amount = parse_decimal(data.get('amount'), 12, 2)
        except ValueError:
            amount = None
        if amount is None or amount <= 0:
            errors.add('amount', 'Please enter a valid donation amount.')
        payment_method = parse_choice(data.get('payment_method'), Donation.PAYMENT_METHOD_CHOICES)
        if not payment_method:
            errors.add('payment_method', 'Please select a payment method.')
        cleaned.update({
            'amount': amount,
            'payment_method': payment_method or '',
            'currency': clean(data.get('currency')).upper() or 'USD',
            'is_tax_deductible': parse_bool(data.get('is_tax_deductible', True)),
            'receipt_required': parse_bool(data.get('receipt_required')),
        })

    if donation_type in (Donation.TYPE_RESOURCE, Donation.TYPE_MIXED):
        cleaned['resources'] = _clean_resource_lines(data.get('resources'), errors)
        if not cleaned['resources'] and not errors:
            errors.add('resources', 'Please add at least one resource item.')
    else:
        cleaned['resources'] = []

    requires_pickup = parse_bool(data.get('requires_pickup'))
    pickup_address = clean(data.get('pickup_address'))
    if requires_pickup and not pickup_address:
        errors.add('pickup_address', 'A pickup address is required when requesting pickup.')

    try:
        preferred_pickup_date = parse_date(data.get('preferred_pickup_date'))
    except ValueError:
        preferred_pickup_date = None
        errors.add('preferred_pickup_date', 'Enter a valid date (YYYY-MM-DD).')

    cleaned.update({
        'is_anonymous': parse_bool(data.get('is_anonymous')),
        'special_instructions': clean(data.get('special_instructions')),
        'requires_pickup': requires_pickup,
        'pickup_address': pickup_address,
        'preferred_pickup_date': preferred_pickup_date,
        'contact_phone': clean(data.get('contact_phone')),
        'delivery_method': parse_choice(data.get('delivery_method'), Donation.DELIVERY_CHOICES, 'drop_off'),
        'target_area': clean(data.get('target_area')),
        'urgency_level': parse_choice(data.get('urgency_level'), Donation.URGENCY_CHOICES, 'normal'),
        'notes': clean(data.get('notes')),
    })
    return cleaned, errors


def transaction_reference_for(donation):
    return f"TXN{timezone.now():%Y%m%d%H%M%S}{donation.pk}"


@service_boundary('create donation')
def create_donation(donor, data) -> ServiceResult:
    """
    Record a new donation pledge.

    Args:
        donor: User making the donation.
        data: Submitted values. ``resources`` is a list of dicts, one per line item.

    Returns:
        ServiceResult whose value is the Donation.
    """
    cleaned, errors = validate_donation(data)
    if errors:
        return ServiceResult.invalid(errors)

    resource_lines = cleaned.pop('resources')
    payment_method = cleaned.pop('payment_method', '')

    with transaction.atomic():
        donation = Donation.objects.create(donor=donor, **cleaned)
        for line in resource_lines:
            ResourceDonation.objects.create(
                donation=donation,
                remaining_quantity=line['quantity'],
                **line
            )
        add_tracking_entry(
            donation,
            Donation.STATUS_PLEDGED,
            INITIAL_NOTES,
            user=donor,
            location=INITIAL_LOCATION,
        )

        if donation.amount:
            process_financial_donation(donation, transaction_reference_for(donation), payment_method, donor)

    logger.info(
        f"Donation {donation.pk} created by {donor.email}: "
        f"{donation.donation_type}, {len(resource_lines)} resource line(s)"
    )
    return ServiceResult.success(donation, 'Thank you! Your donation has been recorded.')


def process_financial_donation(donation, reference, payment_method, user):
    """Record the payment reference and move the donation to Confirmed."""
    donation.transaction_reference = reference
    if payment_method:
        donation.payment_method = payment_method
    return _apply_status(donation, Donation.STATUS_CONFIRMED, user, detail=f"Payment reference {reference}")


# =============================================================================
# Status transitions
# =============================================================================

def can_change_status(user, donation, new_status):
    if user.can_handle_goods:
        return True
    # Donors may withdraw their own pledge
    return donation.donor_id == user.pk and new_status == Donation.STATUS_CANCELLED


@service_boundary('update donation status')
def update_donation_status(donation_id, new_status, user, detail='') -> ServiceResult:
    if new_status not in dict(Donation.STATUS_CHOICES):
        return ServiceResult.invalid({'status': ['Unknown donation status.']})

    with transaction.atomic():
        donation = Donation.objects.select_for_update().filter(pk=donation_id).first()
        if donation is None:
            return ServiceResult.not_found('Donation not found.')
        if not can_change_status(user, donation, new_status):
            return ServiceResult.forbidden()
        if donation.is_terminal:
            return ServiceResult.rejected(
                f"Donation is {donation.get_status_display()} and can no longer change status."
            )
        if donation.status == new_status:
            return ServiceResult.rejected(f"Donation is already {donation.get_status_display()}.")

        _apply_status(donation, new_status, user, detail=detail)

    return ServiceResult.success(donation, f"Donation status updated to {donation.get_status_display()}.")


def confirm_donation(donation_id, user):
    return update_donation_status(donation_id, Donation.STATUS_CONFIRMED, user)


def process_donation(donation_id, user):
    return update_donation_status(donation_id, Donation.STATUS_PROCESSING, user)


def approve_donation(donation_id, user):
    return update_donation_status(donation_id, Donation.STATUS_APPROVED, user)


@service_boundary('reject donation')
def reject_donation(donation_id, reason, user) -> ServiceResult:
    reason = clean(reason)
    if not reason:
        return ServiceResult.invalid({'reason': ['Please give a reason for rejecting this donation.']})

    with transaction.atomic():
        donation = Donation.objects.select_for_update().filter(pk=donation_id).first()
        if donation is None:
            return ServiceResult.not_found('Donation not found.')
        if not user.can_handle_goods:
            return ServiceResult.forbidden()
        if donation.is_terminal or donation.status == Donation.STATUS_REJECTED:
            return ServiceResult.rejected(
                f"Donation is {donation.get_status_display()} and cannot be rejected."
            )
        donation.notes = reason
        _apply_status(donation, Donation.STATUS_REJECTED, user, detail=f"Donation rejected: {reason}")

    return ServiceResult.success(donation, 'Donation rejected.')


@service_boundary('add tracking update')
def add_tracking_update(donation_id, user, location='', notes='', estimated_delivery=None) -> ServiceResult:
    """Record a manual checkpoint (no status change) on a donation's trail."""
    donation = Donation.objects.filter(pk=donation_id).first()
    if donation is None:
        return ServiceResult.not_found('Donation not found.')
    if not user.can_handle_goods:
        return ServiceResult.forbidden()
    if not clean(notes) and not clean(location):
        return ServiceResult.invalid({'notes': ['Enter a location or a note.']})
    try:
        estimated_delivery = parse_datetime(estimated_delivery)
    except ValueError:
        return ServiceResult.invalid({'estimated_delivery': ['Enter a valid date and time.']})

    entry = add_tracking_entry(
        donation,
        donation.status,
        clean(notes),
        user=user,
        location=clean(location),
        estimated_delivery=estimated_delivery,
    )
    return ServiceResult.success(entry, 'Tracking update added.')


# =============================================================================
# Resources
# =============================================================================

@service_boundary('add resource')
def add_resource_donation(donation_id, user, line) -> ServiceResult:
    donation = Donation.objects.filter(pk=donation_id).first()
    if donation is None:
        return ServiceResult.not_found('Donation not found.')
    if donation.donor_id != user.pk and not user.can_handle_goods:
        return ServiceResult.forbidden()
    if not donation.has_resource_part:
        return ServiceResult.rejected('Resources can only be added to resource or mixed donations.')
    if donation.is_terminal:
        return ServiceResult.rejected(f"Donation is {donation.get_status_display()} and can no longer take new items.")

    errors = FieldErrors()
    lines = _clean_resource_lines([line], errors)
    if errors or not lines:
        return ServiceResult.invalid(errors or {'resources-0': ['Item name and quantity are required.']})

    resource = ResourceDonation.objects.create(
        donation=donation,
        remaining_quantity=lines[0]['quantity'],
        **lines[0]
    )
    return ServiceResult.success(resource, f'Added {resource.item_name}.')


@service_boundary('record quality check')
def perform_quality_check(resource_id, user, approved, notes='') -> ServiceResult:
    """Approve (Available) or reject (Rejected) a resource line after inspection."""
    if not user.can_handle_goods:
        return ServiceResult.forbidden('Only admins and volunteers can perform quality checks.')

    resource = ResourceDonation.objects.filter(pk=resource_id).first()
    if resource is None:
        return ServiceResult.not_found('Resource not found.')
    if resource.status == ResourceDonation.STATUS_DISTRIBUTED:
        return ServiceResult.rejected('This resource has already been distributed.')

    resource.status = ResourceDonation.STATUS_AVAILABLE if approved else ResourceDonation.STATUS_REJECTED
    resource.quality_check_date = timezone.now()
    resource.quality_checked_by = user
    resource.quality_notes = clean(notes)
    resource.save()

    logger.info(f"Resource {resource.pk} quality check by {user.email}: {resource.status}")
    verdict = 'approved' if approved else 'rejected'
    return ServiceResult.success(resource, f'Quality check completed: {resource.item_name} {verdict}.')


def resource_donations_for(donation_id):
    return ResourceDonation.objects.filter(donation_id=donation_id)


def available_resources():
    return ResourceDonation.objects.filter(
        status=ResourceDonation.STATUS_AVAILABLE,
        remaining_quantity__gt=0,
    ).select_related('donation')


def resources_by_category(category):
    return ResourceDonation.objects.filter(category=category).select_related('donation')


def expiring_resources(days=EXPIRING_WITHIN_DAYS):
    today = timezone.localdate()
    return ResourceDonation.objects.filter(
        expiration_date__isnull=False,
        expiration_date__gte=today,
        expiration_date__lte=today + timedelta(days=days),
        status=ResourceDonation.STATUS_AVAILABLE,
    ).order_by('expiration_date')


def resources_pending_quality_check():
    return ResourceDonation.objects.filter(
        status=ResourceDonation.STATUS_AVAILABLE,
        quality_check_date__isnull=True,
    ).select_related('donation')


# =============================================================================
# Distribution
# =============================================================================

def _parse_allocations(raw, errors):
    allocations = {}
    for resource_id, quantity in (raw or {}).items():
        try:
            resource_id = int(resource_id)
            quantity = parse_int(quantity) or 0
        except (TypeError, ValueError):
            errors.add('allocations', 'Quantities must be whole numbers.')
            continue
        if quantity < 0:
            errors.add(f'resource-{resource_id}', 'Quantity cannot be negative.')
            continue
        allocations[resource_id] = allocations.get(resource_id, 0) + quantity
    return allocations


@service_boundary('record distribution')
def create_distribution(donation_id, user, data) -> ServiceResult:
    """
    Hand out goods from a donation.

    ``data['allocations']`` maps resource line id to the quantity handed out.
    The distribution, the donation status change and every resource line
    update commit together or not at all.
    """
    if not user.can_handle_goods:
        return ServiceResult.forbidden('Only admins and volunteers can record distributions.')

    errors = FieldErrors()
    location = clean(data.get('distribution_location'))
    if not location:
        errors.add('distribution_location', 'Distribution location is required.')
    try:
        recipients = parse_int(data.get('number_of_recipients'))
    except ValueError:
        recipients = None
    if not recipients or recipients < 1:
        errors.add('number_of_recipients', 'Number of recipients must be at least 1.')
    allocations = _parse_allocations(data.get('allocations'), errors)

    with transaction.atomic():
        donation = Donation.objects.select_for_update().filter(pk=donation_id).first()
        if donation is None:
            return ServiceResult.not_found('Donation not found.')
        if donation.is_terminal or donation.status == Donation.STATUS_REJECTED:
            return ServiceResult.rejected(
                f"Donation is {donation.get_status_display()} and cannot be distributed."
            )

        resources = {r.pk: r for r in donation.resources.select_for_update()}
        planned = []
        for resource_id, quantity in allocations.items():
            resource = resources.get(resource_id)
            if resource is None:
                errors.add('allocations', f'Resource #{resource_id} is not part of this donation.')
            elif quantity == 0:
                continue
            elif resource.status != ResourceDonation.STATUS_AVAILABLE:
                errors.add(f'resource-{resource_id}', f'{resource.item_name} is not available for distribution.')
            elif quantity > resource.remaining_quantity:
                errors.add(
                    f'resource-{resource_id}',
                    f'Only {resource.remaining_quantity} of {resource.item_name} remaining.'
                )
            else:
                planned.append((resource, quantity))

        if resources and not planned and not errors:
            errors.add('allocations', 'Allocate at least one item to distribute.')
        if errors:
            return ServiceResult.invalid(errors)

        distribution = DonationDistribution.objects.create(
            donation=donation,
            distribution_date=timezone.now(),
            distribution_location=location,
            number_of_recipients=recipients,
            recipient_organization=clean(data.get('recipient_organization')),
            contact_person=clean(data.get('contact_person')),
            contact_phone=clean(data.get('contact_phone')),
            distributed_by=user,
            notes=clean(data.get('notes')),
        )

        if donation.status != Donation.STATUS_DISTRIBUTED:
            _apply_status(donation, Donation.STATUS_DISTRIBUTED, user, detail=f"Distributed at {location}")

        for resource, quantity in planned:
            resource.remaining_quantity -= quantity
            if resource.remaining_quantity <= 0:
                resource.remaining_quantity = 0
                resource.status = ResourceDonation.STATUS_DISTRIBUTED
            resource.save(update_fields=['remaining_quantity', 'status'])

            ResourceDistribution.objects.create(
                distribution=distribution,
                resource=resource,
                quantity_distributed=quantity,
                remaining_quantity=resource.remaining_quantity,
            )

    logger.info(
        f"Distribution {distribution.pk} for donation {donation.pk} at {location}: "
        f"{sum(q for _, q in planned)} unit(s) to {recipients} recipient(s)"
    )
    return ServiceResult.success(distribution, 'Distribution recorded successfully.')


# =============================================================================
# Queries
# =============================================================================

def get_donation(donation_id):
    return (
        Donation.objects
        .select_related('donor', 'processed_by', 'distributed_by')
        .prefetch_related('resources', 'tracking_history', 'distributions__resource_distributions')
        .filter(pk=donation_id)
        .first()
    )


def search_donations(term=None, donation_type=None, status=None, urgency=None,
                     location=None, date_from=None, date_to=None):
    """Filter donations; every argument is optional. Newest first."""
    queryset = Donation.objects.select_related('donor')

    term = clean(term)
    if term:
        queryset = queryset.filter(
            Q(special_instructions__icontains=term) |
            Q(target_area__icontains=term) |
            Q(resources__item_name__icontains=term)
        ).distinct()
    if donation_type:
        queryset = queryset.filter(donation_type=donation_type)
    if status:
        queryset = queryset.filter(status=status)
    if urgency:
        queryset = queryset.filter(urgency_level=urgency)
    if clean(location):
        queryset = queryset.filter(target_area__icontains=clean(location))
    if date_from:
        queryset = queryset.filter(donation_date__date__gte=date_from)
    if date_to:
        queryset = queryset.filter(donation_date__date__lte=date_to)

    return queryset.order_by('-donation_date', '-id')


def donations_by_status(status):
    return Donation.objects.filter(status=status)


def donations_by_type(donation_type):
    return Donation.objects.filter(donation_type=donation_type)


def donations_for_user(user):
    return Donation.objects.filter(donor=user).prefetch_related('resources')


def recent_donations(count=10):
    return Donation.objects.select_related('donor').order_by('-donation_date', '-id')[:count]


def urgent_donations():
    return Donation.objects.filter(urgency_level__in=Donation.URGENT_LEVELS)


def tracking_history(donation_id):
    return DonationTracking.objects.filter(donation_id=donation_id).order_by('-status_date', '-id')


def latest_tracking(donation_id):
    return tracking_history(donation_id).first()


@service_boundary('delete donation')
def delete_donation(donation_id, user) -> ServiceResult:
    donation = Donation.objects.filter(pk=donation_id).first()
    if donation is None:
        return ServiceResult.not_found('Donation not found.')
    if not user.is_admin and not (donation.donor_id == user.pk and donation.status == Donation.STATUS_PLEDGED):
        return ServiceResult.forbidden()
    donation.delete()
    logger.info(f"Donation {donation_id} deleted by {user.email}")
    return ServiceResult.success(message='Donation deleted.')


def generate_tax_receipt(donation_id, user) -> ServiceResult:
    donation = Donation.objects.filter(pk=donation_id).first()
    if donation is None:
        return ServiceResult.not_found('Donation not found.')
    if donation.donor_id != user.pk:
        return ServiceResult.forbidden('Tax receipts are only available to the donor.')
    if not donation.amount:
        return ServiceResult.rejected('Tax receipts are only available for financial donations.')

    text = f"Tax Receipt #{donation.pk} - ${donation.amount:.2f} - Generated on {timezone.localdate():%Y-%m-%d}"
    return ServiceResult.success(text)


# =============================================================================
# Donation centers
# =============================================================================

def validate_center(data):
    errors = FieldErrors()
    for field_name, label in (('name', 'Name'), ('address', 'Address'), ('city', 'City')):
        if not clean(data.get(field_name)):
            errors.add(field_name, f'{label} is required.')
    try:
        capacity = parse_int(data.get('capacity')) or 0
    except ValueError:
        capacity = 0
        errors.add('capacity', 'Capacity must be a whole number.')

    cleaned = {
        field_name: clean(data.get(field_name))
        for field_name in (
            'name', 'address', 'city', 'state', 'zip_code', 'phone', 'email',
            'operating_hours', 'accepted_resource_types', 'special_instructions',
        )
    }
    cleaned['capacity'] = capacity
    cleaned['is_active'] = parse_bool(data.get('is_active', True))
    return cleaned, errors


@service_boundary('save donation center')
def save_donation_center(user, data, center_id=None) -> ServiceResult:
    if not user.is_admin:
        return ServiceResult.forbidden()

    cleaned, errors = validate_center(data)
    if errors:
        return ServiceResult.invalid(errors)

    if center_id is None:
        center = DonationCenter.objects.create(manager=user, **cleaned)
        return ServiceResult.success(center, f'{center.name} added.')

    center = DonationCenter.objects.filter(pk=center_id).first()
    if center is None:
        return ServiceResult.not_found('Donation center not found.')
    for key, value in cleaned.items():
        setattr(center, key, value)
    center.save()
    return ServiceResult.success(center, f'{center.name} updated.')


def active_donation_centers():
    return DonationCenter.objects.filter(is_active=True)


def nearby_donation_centers(city):
    return active_donation_centers().filter(city__iexact=clean(city))
