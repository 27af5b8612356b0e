from django.contrib import admin

from .models import (
    DisasterIncident,
    IncidentMedia,
    IncidentResource,
    IncidentResponse,
    IncidentUpdate,
)


class IncidentUpdateInline(admin.TabularInline):
    """Read-only update log within an incident."""
    model = IncidentUpdate
    extra = 0
    fields = ('update_date', 'update_type', 'update_text', 'updated_by', 'is_critical')
    readonly_fields = fields
    can_delete = False


class IncidentResourceInline(admin.TabularInline):
    model = IncidentResource
    extra = 0
    fields = ('resource_type', 'description', 'quantity_needed', 'quantity_available', 'priority', 'status')


@admin.register(DisasterIncident)
class DisasterIncidentAdmin(admin.ModelAdmin):
    list_display = ('id', 'title', 'incident_type', 'severity', 'status', 'priority', 'verification_status', 'incident_date')
    list_filter = ('incident_type', 'status', 'priority', 'verification_status', 'severity')
    search_fields = ('title', 'description', 'location')
    ordering = ('-incident_date',)
    readonly_fields = ('created_at', 'updated_at', 'reported_date', 'verified_date')
    inlines = [IncidentResourceInline, IncidentUpdateInline]


@admin.register(IncidentResponse)
class IncidentResponseAdmin(admin.ModelAdmin):
    list_display = ('incident', 'response_type', 'status', 'responded_by', 'response_date')
    list_filter = ('response_type', 'status')
    search_fields = ('description', 'incident__title')


@admin.register(IncidentMedia)
class IncidentMediaAdmin(admin.ModelAdmin):
    list_display = ('file_name', 'incident', 'media_type', 'file_size', 'upload_date')
    list_filter = ('media_type',)
    search_fields = ('file_name', 'description')
