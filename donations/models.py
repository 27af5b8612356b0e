from django.conf import settings
from django.db import models
from django.utils import timezone


# =============================================================================
# Donations
# =============================================================================

class Donation(models.Model):
    """
    A pledge of money and/or goods, tracked from pledge through distribution.

    Financial fields are only meaningful for financial and mixed donations;
    goods are recorded as ResourceDonation lines.
    """
    TYPE_FINANCIAL = 'financial'
    TYPE_RESOURCE = 'resource'
    TYPE_MIXED = 'mixed'

    TYPE_CHOICES = [
        (TYPE_FINANCIAL, 'Financial'),
        (TYPE_RESOURCE, 'Resource'),
        (TYPE_MIXED, 'Mixed'),
    ]

    STATUS_PLEDGED = 'pledged'
    STATUS_CONFIRMED = 'confirmed'
    STATUS_IN_TRANSIT = 'in_transit'
    STATUS_RECEIVED = 'received'
    STATUS_PROCESSING = 'processing'
    STATUS_QUALITY_CHECK = 'quality_check'
    STATUS_APPROVED = 'approved'
    STATUS_REJECTED = 'rejected'
    STATUS_DISTRIBUTED = 'distributed'
    STATUS_COMPLETED = 'completed'
    STATUS_CANCELLED = 'cancelled'

    STATUS_CHOICES = [
        (STATUS_PLEDGED, 'Pledged'),
        (STATUS_CONFIRMED, 'Confirmed'),
        (STATUS_IN_TRANSIT, 'In Transit'),
        (STATUS_RECEIVED, 'Received'),
        (STATUS_PROCESSING, 'Processing'),
        (STATUS_QUALITY_CHECK, 'Quality Check'),
        (STATUS_APPROVED, 'Approved'),
        (STATUS_REJECTED, 'Rejected'),
        (STATUS_DISTRIBUTED, 'Distributed'),
        (STATUS_COMPLETED, 'Completed'),
        (STATUS_CANCELLED, 'Cancelled'),
    ]

    TERMINAL_STATUSES = (STATUS_COMPLETED, STATUS_CANCELLED)
    ACTIVE_STATUSES = (STATUS_CONFIRMED, STATUS_PROCESSING)
    DISTRIBUTED_STATUSES = (STATUS_DISTRIBUTED, STATUS_COMPLETED)

    DELIVERY_CHOICES = [
        ('drop_off', 'Drop Off'),
        ('pickup', 'Pickup'),
        ('shipping', 'Shipping'),
        ('direct_delivery', 'Direct Delivery'),
    ]

    URGENCY_CHOICES = [
        ('low', 'Low'),
        ('normal', 'Normal'),
        ('high', 'High'),
        ('critical', 'Critical'),
        ('emergency', 'Emergency'),
    ]
    URGENT_LEVELS = ('critical', 'emergency')

    PAYMENT_METHOD_CHOICES = [
        ('credit_card', 'Credit Card'),
        ('debit_card', 'Debit Card'),
        ('bank_transfer', 'Bank Transfer'),
        ('paypal', 'PayPal'),
        ('check', 'Check'),
        ('cash', 'Cash'),
        ('other', 'Other'),
    ]

    donation_type = models.CharField(max_length=20, choices=TYPE_CHOICES)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_PLEDGED)
    donation_date = models.DateTimeField(default=timezone.now)

    donor = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='donations'
    )
    is_anonymous = models.BooleanField(default=False)
    special_instructions = models.TextField(blank=True)

    # Logistics
    requires_pickup = models.BooleanField(default=False)
    pickup_address = models.CharField(max_length=500, blank=True)
    preferred_pickup_date = models.DateField(null=True, blank=True)
    contact_phone = models.CharField(max_length=30, blank=True)
    delivery_method = models.CharField(max_length=20, choices=DELIVERY_CHOICES, default='drop_off')
    target_area = models.CharField(
        max_length=200,
        blank=True,
        help_text="Community or region this donation is meant for"
    )
    urgency_level = models.CharField(max_length=20, choices=URGENCY_CHOICES, default='normal')

    # Financial
    amount = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    currency = models.CharField(max_length=3, default='USD')
    payment_method = models.CharField(max_length=20, choices=PAYMENT_METHOD_CHOICES, blank=True)
    transaction_reference = models.CharField(max_length=100, blank=True)
    is_tax_deductible = models.BooleanField(default=True)
    receipt_required = models.BooleanField(default=False)

    # Processing
    processed_date = models.DateTimeField(null=True, blank=True)
    processed_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='processed_donations'
    )
    distribution_date = models.DateTimeField(null=True, blank=True)
    distributed_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='distributed_donations'
    )
    notes = models.TextField(blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-donation_date', '-id']
        verbose_name = 'Donation'
        verbose_name_plural = 'Donations'

    def __str__(self):
        return f"Donation #{self.pk} ({self.get_donation_type_display()}, {self.get_status_display()})"

    @property
    def has_financial_part(self):
        return self.donation_type in (self.TYPE_FINANCIAL, self.TYPE_MIXED)

    @property
    def has_resource_part(self):
        return self.donation_type in (self.TYPE_RESOURCE, self.TYPE_MIXED)

    @property
    def is_terminal(self):
        return self.status in self.TERMINAL_STATUSES

    @property
    def is_urgent(self):
        return self.urgency_level in self.URGENT_LEVELS

    @property
    def donor_display(self):
        return 'Anonymous' if self.is_anonymous else str(self.donor)

    @classmethod
    def status_label(cls, status):
        return dict(cls.STATUS_CHOICES).get(status, status)


class ResourceDonation(models.Model):
    """One line of donated goods within a donation."""
    CATEGORY_CHOICES = [
        ('food', 'Food'),
        ('clothing', 'Clothing'),
        ('medical', 'Medical'),
        ('baby_child_care', 'Baby & Child Care'),
        ('personal_hygiene', 'Personal Hygiene'),
        ('household', 'Household'),
        ('electronics', 'Electronics'),
        ('tools', 'Tools'),
        ('educational', 'Educational'),
        ('shelter', 'Shelter'),
        ('transportation', 'Transportation'),
        ('other', 'Other'),
    ]

    CONDITION_CHOICES = [
        ('new', 'New'),
        ('like_new', 'Like New'),
        ('good', 'Good'),
        ('fair', 'Fair'),
        ('needs_repair', 'Needs Repair'),
    ]

    STATUS_AVAILABLE = 'available'
    STATUS_DISTRIBUTED = 'distributed'
    STATUS_REJECTED = 'rejected'

    STATUS_CHOICES = [
        (STATUS_AVAILABLE, 'Available'),
        ('reserved', 'Reserved'),
        ('in_transit', 'In Transit'),
        (STATUS_DISTRIBUTED, 'Distributed'),
        ('expired', 'Expired'),
        ('damaged', 'Damaged'),
        (STATUS_REJECTED, 'Rejected'),
    ]

    donation = models.ForeignKey(Donation, on_delete=models.CASCADE, related_name='resources')
    category = models.CharField(max_length=30, choices=CATEGORY_CHOICES)
    item_name = models.CharField(max_length=200)
    description = models.TextField(blank=True)
    quantity = models.PositiveIntegerField()
    remaining_quantity = models.PositiveIntegerField(
        help_text="Units not yet handed out in a distribution"
    )
    unit_of_measure = models.CharField(max_length=50, blank=True)
    estimated_value = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)
    condition = models.CharField(max_length=20, choices=CONDITION_CHOICES, default='good')
    expiration_date = models.DateField(null=True, blank=True)
    brand = models.CharField(max_length=100, blank=True)
    size = models.CharField(max_length=50, blank=True)
    weight = models.CharField(max_length=50, blank=True)
    storage_requirements = models.CharField(max_length=200, blank=True)
    allergen_info = models.CharField(max_length=200, blank=True)

    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_AVAILABLE)

    # Quality check
    quality_check_date = models.DateTimeField(null=True, blank=True)
    quality_checked_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='quality_checked_resources'
    )
    quality_notes = models.TextField(blank=True)

    class Meta:
        ordering = ['donation', 'id']
        verbose_name = 'Resource Donation'
        verbose_name_plural = 'Resource Donations'

    def __str__(self):
        return f"{self.item_name} x{self.quantity}"

    def save(self, *args, **kwargs):
        if self.remaining_quantity is None:
            self.remaining_quantity = self.quantity
        super().save(*args, **kwargs)

    @property
    def distributed_quantity(self):
        return self.quantity - self.remaining_quantity

    @property
    def is_expiring_soon(self):
        if not self.expiration_date:
            return False
        days_left = (self.expiration_date - timezone.localdate()).days
        return 0 <= days_left <= 7


class DonationTracking(models.Model):
    """Append-only audit entry describing a donation status change or checkpoint."""
    donation = models.ForeignKey(Donation, on_delete=models.CASCADE, related_name='tracking_history')
    status = models.CharField(max_length=20, choices=Donation.STATUS_CHOICES)
    status_date = models.DateTimeField(default=timezone.now)
    location = models.CharField(max_length=200, blank=True)
    notes = models.TextField(blank=True)
    updated_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='donation_tracking_entries'
    )
    estimated_delivery = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering = ['-status_date', '-id']
        verbose_name = 'Donation Tracking Entry'
        verbose_name_plural = 'Donation Tracking'

    def __str__(self):
        return f"#{self.donation_id} {self.get_status_display()} @ {self.status_date:%Y-%m-%d %H:%M}"


# =============================================================================
# Distribution
# =============================================================================

class DonationDistribution(models.Model):
    """A hand-out event: some or all of a donation's goods reached recipients."""
    donation = models.ForeignKey(Donation, on_delete=models.CASCADE, related_name='distributions')
    distribution_date = models.DateTimeField(default=timezone.now)
    distribution_location = models.CharField(max_length=200)
    number_of_recipients = models.PositiveIntegerField()
    recipient_organization = models.CharField(max_length=200, blank=True)
    contact_person = models.CharField(max_length=100, blank=True)
    contact_phone = models.CharField(max_length=30, blank=True)
    distributed_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        related_name='donation_distributions'
    )
    notes = models.TextField(blank=True)
    feedback = models.TextField(blank=True)

    class Meta:
        ordering = ['-distribution_date', '-id']
        verbose_name = 'Donation Distribution'
        verbose_name_plural = 'Donation Distributions'

    def __str__(self):
        return f"Distribution of #{self.donation_id} at {self.distribution_location}"


class ResourceDistribution(models.Model):
    """Quantity of one resource line handed out in a distribution."""
    distribution = models.ForeignKey(
        DonationDistribution,
        on_delete=models.CASCADE,
        related_name='resource_distributions'
    )
    resource = models.ForeignKey(
        ResourceDonation,
        on_delete=models.CASCADE,
        related_name='distributions'
    )
    quantity_distributed = models.PositiveIntegerField()
    remaining_quantity = models.PositiveIntegerField(
        help_text="Units left on the resource line after this distribution"
    )
    notes = models.TextField(blank=True)

    class Meta:
        ordering = ['distribution', 'id']

    def __str__(self):
        return f"{self.quantity_distributed} x {self.resource.item_name}"


# =============================================================================
# Donation Centers
# =============================================================================

class DonationCenter(models.Model):
    """Physical drop-off location accepting donated goods."""
    name = models.CharField(max_length=200)
    address = models.CharField(max_length=500)
    city = models.CharField(max_length=100)
    state = models.CharField(max_length=50, blank=True)
    zip_code = models.CharField(max_length=20, blank=True)
    phone = models.CharField(max_length=30, blank=True)
    email = models.EmailField(blank=True)
    operating_hours = models.CharField(max_length=200, blank=True)
    capacity = models.PositiveIntegerField(default=0)
    current_utilization = models.PositiveIntegerField(default=0)
    accepted_resource_types = models.CharField(
        max_length=500,
        blank=True,
        help_text="Comma-separated resource categories accepted here"
    )
    special_instructions = models.TextField(blank=True)
    is_active = models.BooleanField(default=True)
    manager = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='managed_donation_centers'
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['name']
        verbose_name = 'Donation Center'
        verbose_name_plural = 'Donation Centers'

    def __str__(self):
        return f"{self.name} ({self.city})"

    @property
    def utilization_percent(self):
        if not self.capacity:
            return 0
        return round(self.current_utilization * 100 / self.capacity)
