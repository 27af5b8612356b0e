from django.conf import settings
from django.db import models
from django.utils import timezone


# =============================================================================
# Incidents
# =============================================================================

class DisasterIncident(models.Model):
    """
    A reported disaster event.

    Status and verification are tracked separately: status follows the
    response, verification follows whether the report has been confirmed.
    """
    TYPE_CHOICES = [
        ('earthquake', 'Earthquake'),
        ('flood', 'Flood'),
        ('hurricane', 'Hurricane'),
        ('tornado', 'Tornado'),
        ('wildfire', 'Wildfire'),
        ('tsunami', 'Tsunami'),
        ('landslide', 'Landslide'),
        ('drought', 'Drought'),
        ('blizzard', 'Blizzard'),
        ('volcanic_eruption', 'Volcanic Eruption'),
        ('pandemic', 'Pandemic'),
        ('industrial_accident', 'Industrial Accident'),
        ('terrorist_attack', 'Terrorist Attack'),
        ('other', 'Other'),
    ]

    SEVERITY_CHOICES = [
        (1, 'Minor'),
        (2, 'Moderate'),
        (3, 'Major'),
        (4, 'Severe'),
        (5, 'Catastrophic'),
    ]

    STATUS_REPORTED = 'reported'
    STATUS_VERIFIED = 'verified'
    STATUS_RESPONSE_IN_PROGRESS = 'response_in_progress'
    STATUS_RESOLVED = 'resolved'
    STATUS_CLOSED = 'closed'

    STATUS_CHOICES = [
        (STATUS_REPORTED, 'Reported'),
        ('under_review', 'Under Review'),
        (STATUS_VERIFIED, 'Verified'),
        (STATUS_RESPONSE_IN_PROGRESS, 'Response In Progress'),
        (STATUS_RESOLVED, 'Resolved'),
        (STATUS_CLOSED, 'Closed'),
        ('duplicate', 'Duplicate'),
        ('invalid', 'Invalid'),
    ]
    ACTIVE_STATUSES = (STATUS_RESPONSE_IN_PROGRESS, STATUS_VERIFIED)
    RESOLVED_STATUSES = (STATUS_RESOLVED, STATUS_CLOSED)

    PRIORITY_CHOICES = [
        ('low', 'Low'),
        ('medium', 'Medium'),
        ('high', 'High'),
        ('critical', 'Critical'),
        ('emergency', 'Emergency'),
    ]
    CRITICAL_PRIORITIES = ('critical', 'emergency')

    VERIFICATION_PENDING = 'pending'
    VERIFICATION_VERIFIED = 'verified'

    VERIFICATION_CHOICES = [
        (VERIFICATION_PENDING, 'Pending'),
        (VERIFICATION_VERIFIED, 'Verified'),
        ('requires_more_info', 'Requires More Info'),
        ('rejected', 'Rejected'),
        ('duplicate', 'Duplicate'),
    ]

    title = models.CharField(max_length=200)
    incident_type = models.CharField(max_length=30, choices=TYPE_CHOICES)
    description = models.TextField()
    location = models.CharField(max_length=300)
    latitude = models.DecimalField(max_digits=9, decimal_places=6, null=True, blank=True)
    longitude = models.DecimalField(max_digits=9, decimal_places=6, null=True, blank=True)
    incident_date = models.DateTimeField()
    severity = models.PositiveSmallIntegerField(choices=SEVERITY_CHOICES, default=2)
    status = models.CharField(max_length=30, choices=STATUS_CHOICES, default=STATUS_REPORTED)

    # Impact
    affected_population = models.PositiveIntegerField(default=0)
    casualties = models.PositiveIntegerField(default=0)
    injuries = models.PositiveIntegerField(default=0)
    property_damage_estimate = models.DecimalField(max_digits=14, decimal_places=2, null=True, blank=True)
    infrastructure_damage = models.TextField(blank=True)

    # Needs and conditions
    immediate_needs = models.TextField(blank=True)
    resources_required = models.TextField(blank=True)
    access_routes = models.TextField(blank=True)
    weather_conditions = models.CharField(max_length=200, blank=True)
    contact_information = models.CharField(max_length=300, blank=True)

    # Workflow
    reported_date = models.DateTimeField(default=timezone.now)
    reported_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='reported_incidents'
    )
    assigned_to = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='assigned_incidents'
    )
    priority = models.CharField(max_length=20, choices=PRIORITY_CHOICES, default='medium')
    verification_status = models.CharField(
        max_length=30,
        choices=VERIFICATION_CHOICES,
        default=VERIFICATION_PENDING
    )
    verified_date = models.DateTimeField(null=True, blank=True)
    verified_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='verified_incidents'
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-incident_date', '-id']
        verbose_name = 'Disaster Incident'
        verbose_name_plural = 'Disaster Incidents'

    def __str__(self):
        return f"#{self.pk} {self.title}"

    @property
    def is_critical(self):
        return self.priority in self.CRITICAL_PRIORITIES

    @property
    def needs_attention(self):
        return (
            self.status == self.STATUS_REPORTED
            or self.verification_status == self.VERIFICATION_PENDING
            or self.is_critical
        )

    def can_edit(self, user):
        return user.pk in (self.reported_by_id, self.assigned_to_id)

    def can_delete(self, user):
        return user.pk == self.reported_by_id or user.is_admin

    @classmethod
    def label_for(cls, choices, value):
        return dict(choices).get(value, value)


class IncidentUpdate(models.Model):
    """Append-only log entry on an incident."""
    TYPE_GENERAL = 'general'
    TYPE_STATUS_CHANGE = 'status_change'

    UPDATE_TYPE_CHOICES = [
        (TYPE_GENERAL, 'General'),
        (TYPE_STATUS_CHANGE, 'Status Change'),
        ('resource_update', 'Resource Update'),
        ('casualty_update', 'Casualty Update'),
        ('weather_update', 'Weather Update'),
        ('access_update', 'Access Update'),
        ('response_update', 'Response Update'),
    ]

    incident = models.ForeignKey(DisasterIncident, on_delete=models.CASCADE, related_name='updates')
    update_text = models.TextField()
    update_type = models.CharField(max_length=30, choices=UPDATE_TYPE_CHOICES, default=TYPE_GENERAL)
    update_date = models.DateTimeField(default=timezone.now)
    updated_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        related_name='incident_updates'
    )
    is_critical = models.BooleanField(default=False)

    class Meta:
        ordering = ['-update_date', '-id']

    def __str__(self):
        return f"#{self.incident_id}: {self.update_text[:50]}"


# =============================================================================
# Incident children: resource requests, responses, media
# =============================================================================

class IncidentResource(models.Model):
    """Something the incident needs: supplies, people, equipment."""
    TYPE_CHOICES = [
        ('medical_supplies', 'Medical Supplies'),
        ('food', 'Food'),
        ('water', 'Water'),
        ('shelter', 'Shelter'),
        ('clothing', 'Clothing'),
        ('transportation', 'Transportation'),
        ('communication', 'Communication'),
        ('personnel', 'Personnel'),
        ('equipment', 'Equipment'),
        ('other', 'Other'),
    ]

    PRIORITY_CHOICES = [
        ('low', 'Low'),
        ('medium', 'Medium'),
        ('high', 'High'),
        ('critical', 'Critical'),
    ]

    STATUS_NEEDED = 'needed'
    STATUS_CHOICES = [
        (STATUS_NEEDED, 'Needed'),
        ('requested', 'Requested'),
        ('in_transit', 'In Transit'),
        ('delivered', 'Delivered'),
        ('cancelled', 'Cancelled'),
    ]

    incident = models.ForeignKey(DisasterIncident, on_delete=models.CASCADE, related_name='resource_requests')
    resource_type = models.CharField(max_length=30, choices=TYPE_CHOICES)
    description = models.CharField(max_length=300)
    quantity_needed = models.PositiveIntegerField(default=1)
    quantity_available = models.PositiveIntegerField(default=0)
    priority = models.CharField(max_length=20, choices=PRIORITY_CHOICES, default='medium')
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_NEEDED)
    requested_date = models.DateTimeField(default=timezone.now)
    required_by_date = models.DateTimeField(null=True, blank=True)
    requested_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        related_name='incident_resource_requests'
    )

    class Meta:
        ordering = ['-requested_date', '-id']

    def __str__(self):
        return f"{self.get_resource_type_display()}: {self.description}"

    @property
    def shortfall(self):
        return max(self.quantity_needed - self.quantity_available, 0)


class IncidentResponse(models.Model):
    """An action taken in response to an incident."""
    TYPE_CHOICES = [
        ('search_and_rescue', 'Search and Rescue'),
        ('medical_aid', 'Medical Aid'),
        ('evacuation', 'Evacuation'),
        ('shelter_provision', 'Shelter Provision'),
        ('food_distribution', 'Food Distribution'),
        ('water_supply', 'Water Supply'),
        ('infrastructure_repair', 'Infrastructure Repair'),
        ('communication_restoration', 'Communication Restoration'),
        ('security', 'Security'),
        ('other', 'Other'),
    ]

    STATUS_CHOICES = [
        ('planned', 'Planned'),
        ('in_progress', 'In Progress'),
        ('completed', 'Completed'),
        ('cancelled', 'Cancelled'),
        ('on_hold', 'On Hold'),
    ]
    ACTIVE_STATUSES = ('in_progress', 'planned')

    incident = models.ForeignKey(DisasterIncident, on_delete=models.CASCADE, related_name='responses')
    response_type = models.CharField(max_length=30, choices=TYPE_CHOICES)
    description = models.TextField()
    response_date = models.DateTimeField(default=timezone.now)
    responded_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        related_name='incident_responses'
    )
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='planned')
    resources_used = models.TextField(blank=True)
    personnel_involved = models.PositiveIntegerField(default=0)
    cost = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    completion_date = models.DateTimeField(null=True, blank=True)
    notes = models.TextField(blank=True)

    class Meta:
        ordering = ['-response_date', '-id']

    def __str__(self):
        return f"{self.get_response_type_display()} for #{self.incident_id}"


class IncidentMedia(models.Model):
    """Metadata for a photo, video or document attached to an incident."""
    MEDIA_TYPE_CHOICES = [
        ('image', 'Image'),
        ('video', 'Video'),
        ('audio', 'Audio'),
        ('document', 'Document'),
        ('other', 'Other'),
    ]

    incident = models.ForeignKey(DisasterIncident, on_delete=models.CASCADE, related_name='media')
    file_name = models.CharField(max_length=255)
    file_path = models.CharField(max_length=500, help_text="Storage path or URL of the file")
    media_type = models.CharField(max_length=20, choices=MEDIA_TYPE_CHOICES, default='image')
    file_size = models.PositiveBigIntegerField(default=0)
    description = models.CharField(max_length=300, blank=True)
    upload_date = models.DateTimeField(default=timezone.now)
    uploaded_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        related_name='incident_media'
    )

    class Meta:
        ordering = ['-upload_date', '-id']
        verbose_name_plural = 'Incident media'

    def __str__(self):
        return self.file_name
