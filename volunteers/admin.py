from django.contrib import admin

from .models import (
    VolunteerAvailability,
    VolunteerCommunication,
    VolunteerProfile,
    VolunteerTask,
    VolunteerTaskAssignment,
)


class VolunteerAvailabilityInline(admin.TabularInline):
    model = VolunteerAvailability
    extra = 0


@admin.register(VolunteerProfile)
class VolunteerProfileAdmin(admin.ModelAdmin):
    list_display = ('user', 'phone_number', 'status', 'background_check_status', 'has_medical_training', 'registration_date')
    list_filter = ('status', 'background_check_status', 'has_medical_training', 'has_transportation')
    search_fields = ('user__email', 'user__first_name', 'user__last_name', 'skills')
    inlines = [VolunteerAvailabilityInline]


class VolunteerTaskAssignmentInline(admin.TabularInline):
    """Inline admin for assignments within a task."""
    model = VolunteerTaskAssignment
    extra = 0
    fields = ('volunteer', 'status', 'hours_worked', 'rating', 'completion_date')


@admin.register(VolunteerTask)
class VolunteerTaskAdmin(admin.ModelAdmin):
    list_display = ('title', 'category', 'priority', 'status', 'start_date', 'max_volunteers')
    list_filter = ('category', 'priority', 'status')
    search_fields = ('title', 'description', 'required_skills', 'location')
    readonly_fields = ('created_at', 'updated_at')
    inlines = [VolunteerTaskAssignmentInline]


@admin.register(VolunteerTaskAssignment)
class VolunteerTaskAssignmentAdmin(admin.ModelAdmin):
    list_display = ('volunteer', 'task', 'status', 'hours_worked', 'rating', 'assigned_date')
    list_filter = ('status',)
    search_fields = ('volunteer__user__email', 'task__title')


@admin.register(VolunteerCommunication)
class VolunteerCommunicationAdmin(admin.ModelAdmin):
    list_display = ('subject', 'volunteer', 'communication_type', 'sent_by', 'sent_date', 'is_read')
    list_filter = ('communication_type', 'is_read')
    search_fields = ('subject', 'message')
