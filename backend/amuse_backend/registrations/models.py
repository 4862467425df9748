import uuid

from django.conf import settings
from django.core.serializers.json import DjangoJSONEncoder
from django.core.validators import MinValueValidator
from django.db import models
from django.utils import timezone

from .pricing import PricingMode, SessionRates


def generate_registration_number():
    return f"REG-{timezone.now().strftime('%Y%m%d')}-{uuid.uuid4().hex[:6].upper()}"


class ProgramConfig(models.Model):
    """Per-program form configuration: rate table, pricing mode and calendar."""

    PRICING_CHOICES = (
        (PricingMode.SESSION, "Half/Full day sessions"),
        (PricingMode.FLAT, "Flat daily rate"),
    )

    program_type = models.SlugField(max_length=50, unique=True)
    title = models.CharField(max_length=150)
    description = models.TextField(blank=True)
    pricing_mode = models.CharField(max_length=10, choices=PRICING_CHOICES, default=PricingMode.SESSION)
    half_day_rate = models.DecimalField(max_digits=10, decimal_places=2, default=0, validators=[MinValueValidator(0)])
    full_day_rate = models.DecimalField(max_digits=10, decimal_places=2, default=0, validators=[MinValueValidator(0)])
    currency = models.CharField(max_length=3, default="KES")
    max_days = models.PositiveIntegerField(default=60)
    start_date = models.DateField(blank=True, null=True)  # maps "Day N" onto the calendar
    creates_invoice = models.BooleanField(default=False)
    is_active = models.BooleanField(default=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["title"]

    def __str__(self):
        return f"{self.title} ({self.currency} {self.half_day_rate}/{self.full_day_rate})"

    @property
    def rates(self):
        return SessionRates(half=self.half_day_rate, full=self.full_day_rate)


class Registration(models.Model):
    PAYMENT_STATUS_CHOICES = (
        ("unpaid", "Unpaid"),
        ("partial", "Partial"),
        ("paid", "Paid"),
    )
    PAYMENT_METHOD_CHOICES = (
        ("pending", "Pending"),
        ("card", "Card"),
        ("mpesa", "M-Pesa"),
        ("cash_ground", "Cash (Ground)"),
    )
    REGISTRATION_TYPE_CHOICES = (
        ("online_only", "Online Only"),
        ("online_paid", "Online Paid"),
        ("ground_registration", "Ground Registration"),
    )
    STATUS_CHOICES = (
        ("active", "Active"),
        ("cancelled", "Cancelled"),
        ("completed", "Completed"),
    )

    registration_number = models.CharField(max_length=30, unique=True, default=generate_registration_number)
    program = models.ForeignKey(ProgramConfig, on_delete=models.PROTECT, related_name="registrations")
    parent_name = models.CharField(max_length=100)
    email = models.EmailField()
    phone = models.CharField(max_length=20)
    emergency_contact = models.CharField(max_length=100, blank=True)
    children = models.JSONField(default=list, encoder=DjangoJSONEncoder)
    total_amount = models.DecimalField(max_digits=12, decimal_places=2, default=0)
    amount_paid = models.DecimalField(max_digits=12, decimal_places=2, default=0)
    payment_status = models.CharField(max_length=10, choices=PAYMENT_STATUS_CHOICES, default="unpaid")
    payment_method = models.CharField(max_length=20, choices=PAYMENT_METHOD_CHOICES, default="pending")
    payment_reference = models.CharField(max_length=100, blank=True, null=True)
    registration_type = models.CharField(max_length=30, choices=REGISTRATION_TYPE_CHOICES, default="online_only")
    qr_code_data = models.TextField(blank=True)
    consent_given = models.BooleanField(default=False)
    status = models.CharField(max_length=10, choices=STATUS_CHOICES, default="active")
    extra_details = models.JSONField(default=dict, blank=True, encoder=DjangoJSONEncoder)
    admin_notes = models.TextField(blank=True)
    created_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True,
                                   related_name="ground_registrations")
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["email", "phone"], name="registration_contact_idx"),
            models.Index(fields=["payment_status"], name="registration_payment_idx"),
            models.Index(fields=["payment_reference"], name="registration_reference_idx"),
        ]

    def __str__(self):
        return f"{self.registration_number} - {self.parent_name} ({self.payment_status})"

    @property
    def balance(self):
        return self.total_amount - self.amount_paid


class Lead(models.Model):
    STATUS_CHOICES = (
        ("new", "New"),
        ("contacted", "Contacted"),
        ("qualified", "Qualified"),
        ("converted", "Converted"),
        ("lost", "Lost"),
    )

    full_name = models.CharField(max_length=100)
    email = models.EmailField()
    phone = models.CharField(max_length=20, blank=True)
    program_type = models.CharField(max_length=50)
    program_name = models.CharField(max_length=150, blank=True)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default="new")
    source = models.CharField(max_length=30, default="website")
    notes = models.TextField(blank=True)
    form_data = models.JSONField(default=dict, blank=True, encoder=DjangoJSONEncoder)
    assigned_to = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True,
                                    related_name="assigned_leads")
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]

    def __str__(self):
        return f"{self.full_name} - {self.program_type} ({self.status})"


class CampAttendance(models.Model):
    registration = models.ForeignKey(Registration, on_delete=models.CASCADE, related_name="attendance_records")
    child_name = models.CharField(max_length=100)
    attendance_date = models.DateField(default=timezone.localdate)
    check_in_time = models.DateTimeField(default=timezone.now)
    check_out_time = models.DateTimeField(blank=True, null=True)
    marked_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True)
    notes = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-attendance_date", "child_name"]
        constraints = [
            models.UniqueConstraint(
                fields=["registration", "child_name", "attendance_date"],
                name="unique_daily_attendance",
            ),
        ]

    def __str__(self):
        return f"{self.child_name} - {self.attendance_date}"
