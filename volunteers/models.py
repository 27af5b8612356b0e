from django.conf import settings
from django.db import models
from django.db.models import Q
from django.utils import timezone


# =============================================================================
# Volunteer Management Models
# =============================================================================

class VolunteerProfile(models.Model):
    """Volunteer details for a portal user (one profile per user)."""
    STATUS_ACTIVE = 'active'

    STATUS_CHOICES = [
        (STATUS_ACTIVE, 'Active'),
        ('inactive', 'Inactive'),
        ('suspended', 'Suspended'),
        ('training', 'Training'),
    ]

    BACKGROUND_CHECK_CHOICES = [
        ('pending', 'Pending'),
        ('approved', 'Approved'),
        ('rejected', 'Rejected'),
        ('not_required', 'Not Required'),
    ]

    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='volunteer_profile'
    )
    phone_number = models.CharField(max_length=30)
    emergency_contact = models.CharField(max_length=100, blank=True)
    emergency_contact_phone = models.CharField(max_length=30, blank=True)
    skills = models.TextField(blank=True, help_text="Comma-separated list of skills")
    availability = models.TextField(blank=True, help_text="Free-text availability, e.g. 'Weekends'")
    has_transportation = models.BooleanField(default=False)
    has_medical_training = models.BooleanField(default=False)
    languages = models.CharField(max_length=200, blank=True)
    previous_experience = models.TextField(blank=True)
    background_check_status = models.CharField(
        max_length=20,
        choices=BACKGROUND_CHECK_CHOICES,
        default='pending'
    )
    registration_date = models.DateTimeField(default=timezone.now)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_ACTIVE)

    class Meta:
        ordering = ['user__last_name', 'user__first_name']
        verbose_name = 'Volunteer Profile'
        verbose_name_plural = 'Volunteer Profiles'

    def __str__(self):
        return str(self.user)

    @property
    def is_active(self):
        return self.status == self.STATUS_ACTIVE

    @property
    def skill_list(self):
        """Skills split on commas, trimmed and lower-cased."""
        return [skill.strip().lower() for skill in self.skills.split(',') if skill.strip()]


class VolunteerTask(models.Model):
    """A piece of relief work volunteers can sign up for."""
    CATEGORY_EMERGENCY_RESPONSE = 'emergency_response'

    CATEGORY_CHOICES = [
        (CATEGORY_EMERGENCY_RESPONSE, 'Emergency Response'),
        ('food_distribution', 'Food Distribution'),
        ('medical_support', 'Medical Support'),
        ('shelter_management', 'Shelter Management'),
        ('transportation', 'Transportation'),
        ('communication', 'Communication'),
        ('administrative', 'Administrative'),
        ('cleanup', 'Cleanup'),
        ('fundraising', 'Fundraising'),
        ('training', 'Training'),
    ]

    PRIORITY_CHOICES = [
        ('low', 'Low'),
        ('medium', 'Medium'),
        ('high', 'High'),
        ('critical', 'Critical'),
    ]

    STATUS_OPEN = 'open'
    STATUS_COMPLETED = 'completed'

    STATUS_CHOICES = [
        (STATUS_OPEN, 'Open'),
        ('in_progress', 'In Progress'),
        (STATUS_COMPLETED, 'Completed'),
        ('cancelled', 'Cancelled'),
        ('on_hold', 'On Hold'),
    ]

    title = models.CharField(max_length=200)
    description = models.TextField()
    category = models.CharField(max_length=30, choices=CATEGORY_CHOICES)
    priority = models.CharField(max_length=20, choices=PRIORITY_CHOICES, default='medium')
    required_skills = models.TextField(blank=True)
    location = models.CharField(max_length=300)
    start_date = models.DateTimeField()
    end_date = models.DateTimeField(null=True, blank=True)
    estimated_hours = models.PositiveIntegerField(default=1)
    max_volunteers = models.PositiveIntegerField(default=1)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_OPEN)
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        related_name='created_volunteer_tasks'
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['start_date', 'id']
        verbose_name = 'Volunteer Task'
        verbose_name_plural = 'Volunteer Tasks'

    def __str__(self):
        return self.title

    @property
    def is_open(self):
        return self.status == self.STATUS_OPEN

    def active_assignments(self):
        return self.assignments.exclude(status__in=VolunteerTaskAssignment.INACTIVE_STATUSES)

    @property
    def spots_remaining(self):
        return max(self.max_volunteers - self.active_assignments().count(), 0)

    @property
    def is_full(self):
        return self.spots_remaining == 0


class VolunteerTaskAssignment(models.Model):
    """One volunteer's claim on one task, with its own lifecycle."""
    STATUS_ASSIGNED = 'assigned'
    STATUS_ACCEPTED = 'accepted'
    STATUS_IN_PROGRESS = 'in_progress'
    STATUS_COMPLETED = 'completed'
    STATUS_DECLINED = 'declined'
    STATUS_CANCELLED = 'cancelled'

    STATUS_CHOICES = [
        (STATUS_ASSIGNED, 'Assigned'),
        (STATUS_ACCEPTED, 'Accepted'),
        (STATUS_IN_PROGRESS, 'In Progress'),
        (STATUS_COMPLETED, 'Completed'),
        (STATUS_DECLINED, 'Declined'),
        (STATUS_CANCELLED, 'Cancelled'),
    ]

    INACTIVE_STATUSES = (STATUS_DECLINED, STATUS_CANCELLED)
    WORKING_STATUSES = (STATUS_ACCEPTED, STATUS_IN_PROGRESS)

    volunteer = models.ForeignKey(VolunteerProfile, on_delete=models.CASCADE, related_name='assignments')
    task = models.ForeignKey(VolunteerTask, on_delete=models.CASCADE, related_name='assignments')
    assigned_date = models.DateTimeField(default=timezone.now)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_ASSIGNED)
    hours_worked = models.DecimalField(max_digits=6, decimal_places=2, default=0)
    notes = models.TextField(blank=True)
    completion_date = models.DateTimeField(null=True, blank=True)
    rating = models.PositiveSmallIntegerField(null=True, blank=True, help_text="1-5, set by an admin")
    feedback = models.TextField(blank=True)

    class Meta:
        ordering = ['-assigned_date', '-id']
        constraints = [
            models.UniqueConstraint(
                fields=['volunteer', 'task'],
                condition=~Q(status__in=['declined', 'cancelled']),
                name='volunteers_one_active_assignment_per_task',
            ),
        ]

    def __str__(self):
        return f"{self.volunteer} -> {self.task} ({self.get_status_display()})"

    @property
    def is_active(self):
        return self.status not in self.INACTIVE_STATUSES


class VolunteerAvailability(models.Model):
    """A weekly window in which a volunteer can be scheduled."""
    DAY_CHOICES = [
        (0, 'Monday'),
        (1, 'Tuesday'),
        (2, 'Wednesday'),
        (3, 'Thursday'),
        (4, 'Friday'),
        (5, 'Saturday'),
        (6, 'Sunday'),
    ]

    volunteer = models.ForeignKey(VolunteerProfile, on_delete=models.CASCADE, related_name='availability_slots')
    day_of_week = models.PositiveSmallIntegerField(choices=DAY_CHOICES)
    start_time = models.TimeField()
    end_time = models.TimeField()
    is_available = models.BooleanField(default=True)

    class Meta:
        ordering = ['day_of_week', 'start_time']
        unique_together = ['volunteer', 'day_of_week']
        verbose_name_plural = 'Volunteer availability'

    def __str__(self):
        return f"{self.volunteer} {self.get_day_of_week_display()} {self.start_time:%H:%M}-{self.end_time:%H:%M}"


class VolunteerCommunication(models.Model):
    """A message sent to a volunteer, optionally about a task."""
    TYPE_CHOICES = [
        ('general', 'General'),
        ('task_assignment', 'Task Assignment'),
        ('emergency', 'Emergency'),
        ('training', 'Training'),
        ('reminder', 'Reminder'),
        ('feedback', 'Feedback'),
    ]

    volunteer = models.ForeignKey(VolunteerProfile, on_delete=models.CASCADE, related_name='communications')
    task = models.ForeignKey(
        VolunteerTask,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='communications'
    )
    subject = models.CharField(max_length=200)
    message = models.TextField()
    communication_type = models.CharField(max_length=20, choices=TYPE_CHOICES, default='general')
    sent_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        related_name='sent_volunteer_messages'
    )
    sent_date = models.DateTimeField(default=timezone.now)
    is_read = models.BooleanField(default=False)

    class Meta:
        ordering = ['-sent_date', '-id']

    def __str__(self):
        return self.subject
