from django.contrib import admin

from .models import (
    Donation,
    DonationCenter,
    DonationDistribution,
    DonationTracking,
    ResourceDistribution,
    ResourceDonation,
)


class ResourceDonationInline(admin.TabularInline):
    """Inline admin for resource lines within a Donation."""
    model = ResourceDonation
    extra = 0
    fields = ('category', 'item_name', 'quantity', 'remaining_quantity', 'condition', 'status')


class DonationTrackingInline(admin.TabularInline):
    """Read-only audit trail within a Donation."""
    model = DonationTracking
    extra = 0
    fields = ('status', 'status_date', 'location', 'notes', 'updated_by')
    readonly_fields = fields
    can_delete = False


@admin.register(Donation)
class DonationAdmin(admin.ModelAdmin):
    list_display = ('id', 'donation_type', 'status', 'donor', 'amount', 'urgency_level', 'donation_date')
    list_filter = ('donation_type', 'status', 'urgency_level', 'donation_date')
    search_fields = ('donor__email', 'target_area', 'special_instructions', 'transaction_reference')
    ordering = ('-donation_date',)
    readonly_fields = ('created_at', 'updated_at', 'processed_date', 'distribution_date')
    inlines = [ResourceDonationInline, DonationTrackingInline]


@admin.register(ResourceDonation)
class ResourceDonationAdmin(admin.ModelAdmin):
    list_display = ('item_name', 'category', 'quantity', 'remaining_quantity', 'status', 'expiration_date')
    list_filter = ('category', 'status', 'condition')
    search_fields = ('item_name', 'description', 'brand')


class ResourceDistributionInline(admin.TabularInline):
    model = ResourceDistribution
    extra = 0
    fields = ('resource', 'quantity_distributed', 'remaining_quantity', 'notes')


@admin.register(DonationDistribution)
class DonationDistributionAdmin(admin.ModelAdmin):
    list_display = ('donation', 'distribution_location', 'number_of_recipients', 'distributed_by', 'distribution_date')
    list_filter = ('distribution_date',)
    search_fields = ('distribution_location', 'recipient_organization')
    inlines = [ResourceDistributionInline]


@admin.register(DonationCenter)
class DonationCenterAdmin(admin.ModelAdmin):
    list_display = ('name', 'city', 'state', 'capacity', 'current_utilization', 'is_active')
    list_filter = ('is_active', 'state')
    search_fields = ('name', 'city', 'address')
    readonly_fields = ('created_at', 'updated_at')
